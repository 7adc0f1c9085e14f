from __future__ import annotations

# Free item grant policies
GRANT_PER_THRESHOLD = "PER_THRESHOLD"
GRANT_ONCE_PER_ORDER = "ONCE_PER_ORDER"
GRANT_POLICIES = (GRANT_PER_THRESHOLD, GRANT_ONCE_PER_ORDER)

# Scope specificity, higher is more specific
SPECIFICITY_PRODUCT = 3
SPECIFICITY_COLLECTION = 2
SPECIFICITY_CATEGORY = 1
SPECIFICITY_NONE = 0

# Exclusion reason codes
REASON_OFFER_INACTIVE = "OFFER_INACTIVE"
REASON_OFFER_NOT_STARTED = "OFFER_NOT_STARTED"
REASON_OFFER_EXPIRED = "OFFER_EXPIRED"
REASON_NO_MATCHING_ITEMS = "NO_MATCHING_ITEMS"
REASON_BELOW_MIN_QUANTITY = "BELOW_MIN_QUANTITY"
REASON_BELOW_MIN_ORDER_AMOUNT = "BELOW_MIN_ORDER_AMOUNT"
REASON_MAX_PER_USER_REACHED = "MAX_PER_USER_REACHED"
REASON_MAX_TOTAL_REDEMPTIONS_REACHED = "MAX_TOTAL_REDEMPTIONS_REACHED"
REASON_NO_EFFECT = "NO_EFFECT"
REASON_OUTRANKED_BY_NON_STACKABLE = "OUTRANKED_BY_NON_STACKABLE"
REASON_STOPPED_AT_NON_STACKABLE = "STOPPED_AT_NON_STACKABLE"

# Upper bound on a cart line total and on the cart total
MAX_CART_AMOUNT = 1_000_000_000_000
