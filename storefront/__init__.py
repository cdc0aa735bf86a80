# Storefront backend: catalogue, carts, checkout, orders, reviews and payments
