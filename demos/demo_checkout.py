#!/usr/bin/env python
"""Demo script showing a checkout priced end to end with friendly units."""

import jax.numpy as jnp
from ticketfee import (
    FeeScheduleConfig,
    CheckoutAdapter,
    format_major,
    format_price,
    line_item_fees,
)


def main():
    """Price a cart, quote a single ticket and build the payment payload."""

    # 1. Create the fee schedule with user-friendly units
    print("Creating fee schedule...")
    schedule = FeeScheduleConfig(
        tier_threshold="₦5,000",     # Highest standard-tier price
        standard_rate="10%",         # Fee for cheaper tickets
        premium_rate="700 bps",      # Fee for pricier tickets
        premium_flat_fee="50 NGN",   # Plus a flat amount per ticket
        vat_rate="7.5%",             # VAT on the service fee
    )

    # 2. Display schedule summary
    print("\n" + schedule.summary(format="text"))

    # 3. Wrap it in an adapter (checks units with pint)
    adapter = CheckoutAdapter(schedule)

    # 4. Price a cart as the storefront holds it (kobo)
    cart = [
        {"cartId": "c1", "eventTitle": "Lagos Jazz Night", "tierName": "Regular",
         "price": 200000, "quantity": 1},
        {"cartId": "c2", "eventTitle": "Afrobeats Live", "tierName": "VIP",
         "price": 1000000, "quantity": 2},
    ]
    print("\nCart:")
    for item in cart:
        print(f"  {item['eventTitle']} ({item['tierName']}) "
              f"{format_price(item['price'])} x {item['quantity']}")

    totals = adapter.cart_totals(cart)
    print("\nTotals:")
    print(f"  Subtotal:    {format_major(totals.subtotal)}")
    print(f"  Service fee: {format_major(totals.service_fee)}")
    print(f"  VAT:         {format_major(totals.vat)}")
    print(f"  Total:       {format_major(totals.final_total)} ({totals.final_total_minor} kobo)")
    print(f"  Mixed tiers: {totals.has_mixed_tiers}")

    # 5. Fee labels for the ticket picker
    print("\nFee labels:")
    for price in (2000, 10000):
        print(f"  {format_major(price)}: {adapter.fee_tier_label(price)}")

    # 6. Single-ticket quote including the gateway's cut
    quote = adapter.order_totals(10000, 2)
    print("\nQuote for 2 x ₦10,000:")
    print(f"  Gateway fee:     {format_major(quote.gateway_fee)}")
    print(f"  Platform margin: {format_major(quote.platform_margin)}")

    # 7. Vectorised fees straight from the runtime
    prices = jnp.array([1000.0, 5000.0, 5000.01, 25000.0])
    fees = line_item_fees(adapter.runtime, prices)
    print("\nPer-ticket fees (kernel):")
    for price, fee, tier in zip(prices.tolist(), fees.total_fee.tolist(), fees.tier.tolist()):
        print(f"  {format_major(price)} -> {format_major(fee)} (tier code {tier})")

    # 8. Payment metadata for the gateway
    payload = adapter.order_metadata(
        totals,
        {"firstName": "Ada", "lastName": "Okafor", "email": "ada@example.ng"},
        cart,
    )
    print("\nPayment metadata order_breakdown:")
    for key, value in payload["order_breakdown"].items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
