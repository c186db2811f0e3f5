"""Coupon value object — a percentage discount gated by a minimum subtotal."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, String

from storefront.domain import storefront


@storefront.value_object
class Coupon:
    code = String(required=True, max_length=100)
    discount_percentage = Float(required=True, min_value=0.0, max_value=100.0)
    minimum_amount = Float(default=0.0, min_value=0.0)

    @invariant.post
    def code_must_not_be_blank(self):
        if not self.code or not self.code.strip():
            raise ValidationError({"code": ["Coupon code cannot be blank"]})

    def is_eligible(self, subtotal: float) -> bool:
        return subtotal >= (self.minimum_amount or 0.0)

    def discounted(self, subtotal: float) -> float:
        return subtotal * (1 - self.discount_percentage / 100)
