"""Storefront bounded context — client-side cart consistency engine.

Keeps a shopping cart's line quantities consistent with per-size inventory,
derives totals and coupon eligibility, applies optimistic local updates and
coalesces rapid quantity edits into debounced writes against the remote cart
service.
"""
