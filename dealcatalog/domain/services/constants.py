# Sort keys accepted by GET /products?sort=
SORT_LOWEST_PRICE = "lowest-price"
SORT_BIGGEST_DISCOUNT_AMOUNT = "biggest-discount-amount"
SORT_HIGHEST_PERCENTAGE = "highest-percentage"

# Unknown or missing sort keys fall back to this one
DEFAULT_SORT = SORT_HIGHEST_PERCENTAGE

# Staleness threshold for the in-memory catalog
CATALOG_TTL_S = 4 * 3600

# Affirmative value for POST /refresh {"refresh": ...}
REFRESH_AFFIRMATIVE = "true"
