"""
workflow.py — Core Orchestration Logic for Checkout

This module contains the checkout workflow of the storefront. It turns an
untrusted cart into exactly one paid order, or rejects it without side effects.

Workflow Overview:
1. Validate the cart shape (ids, quantities, nonce)
2. Load authoritative products from the Inventory Store
3. Check client prices against stored prices (exact match)
4. Check stock for the whole cart (no partial fulfilment)
5. Compute the trusted total from stored prices
6. Charge the payment gateway for the trusted total
7. Conditionally decrement stock (same DB transaction as 8)
8. Create the order and commit
9. Report the order and the gateway transaction
"""

import uuid
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .clients import PaymentGatewayClient
from .exceptions import (
    InsufficientStockError,
    PaymentError,
    PersistenceError,
    ValidationError,
)
from .inventory import InventoryStore
from .logging_config import get_logger
from .models import CartItem, CheckoutRequest, CheckoutResult
from .orders import OrderLedger
from .tables import Product

log = get_logger(__name__)


def normalize_cart(cart: List[CartItem]) -> List[CartItem]:
    """
    Validates the shape of the cart and fills in default quantities.

    Args:
        cart (list[CartItem]): Cart as parsed from the request body.

    Returns:
        list[CartItem]: Copies of the items with `qty` set (default 1).

    Raises:
        ValidationError: If the cart is empty, an item has no product id,
            or a quantity is not a positive integer.
    """
    if not cart:
        raise ValidationError("Cart is empty.")

    normalized = []
    for item in cart:
        if not item.product_id:
            raise ValidationError("Cart item without product id.")
        qty = 1 if item.qty is None else item.qty
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            raise ValidationError("Invalid quantity.")
        normalized.append(item.model_copy(update={"qty": qty}))
    return normalized


def requested_quantities(cart: List[CartItem]) -> Dict[str, int]:
    """Sums requested quantities per product, in order of first appearance."""
    totals = OrderedDict()
    for item in cart:
        totals[item.product_id] = totals.get(item.product_id, 0) + item.qty
    return totals


def compute_trusted_total(cart: List[CartItem], products: Dict[str, Product]) -> Decimal:
    total = Decimal("0")
    for item in cart:
        total += Decimal(products[item.product_id].price) * item.qty
    return total


def build_line_items(cart: List[CartItem], products: Dict[str, Product]) -> List[dict]:
    # Snapshot from stored data; the client's name and price are not kept.
    line_items = []
    for item in cart:
        product = products[item.product_id]
        line_items.append({
            "_id": product.id,
            "name": product.name,
            "price": str(Decimal(product.price)),
            "qty": item.qty,
        })
    return line_items


def process_checkout(session: Session, gateway: PaymentGatewayClient, buyer_id: str,
                     request: CheckoutRequest) -> CheckoutResult:
    """
    Executes the complete checkout for one buyer and one cart.

    Called by the API for every checkout request. The buyer has already been
    authenticated by the time this runs.

    Args:
        session (Session): Database session; its transaction covers steps 7 and 8.
        gateway (PaymentGatewayClient): Client for the hosted payment gateway.
        buyer_id (str): Authenticated buyer.
        request (CheckoutRequest): Nonce and untrusted cart.

    Returns:
        CheckoutResult: The persisted order, gateway transaction id and status,
        and the charged amount.

    Raises:
        ValidationError: Malformed cart, unknown product, or price mismatch.
        InsufficientStockError: Not enough stock, before or after the charge.
        PaymentError: Gateway declined, timed out or could not be reached.
        PersistenceError: Payment captured but stock/order could not be written.

    Compensation:
        - Nothing is written before the gateway reports success.
        - If a decrement or the order insert fails after the charge, the DB
          transaction is rolled back (stock restored) and the captured
          transaction is logged at CRITICAL for manual reconciliation.
          No refund is issued automatically.
    """

    order_id = uuid.uuid4().hex
    log_prefix = f"[Checkout: {order_id}]"

    log.info(f"{log_prefix} Starte Checkout für Käufer {buyer_id}.")

    # --- 1. Warenkorb prüfen ---
    if not request.nonce or not request.nonce.strip():
        raise ValidationError("Payment method is missing.")
    cart = normalize_cart(request.cart)
    quantities = requested_quantities(cart)

    # --- 2. Produkte aus dem Inventar laden ---
    inventory = InventoryStore(session)
    products = inventory.find_by_ids(quantities.keys())
    for product_id in quantities:
        if product_id not in products:
            log.warning(f"{log_prefix} Abgelehnt: unbekanntes Produkt {product_id}.")
            raise ValidationError(f"Unknown product: {product_id}")

    # --- 3. Preise prüfen ---
    for item in cart:
        stored_price = Decimal(products[item.product_id].price)
        if item.price is not None and item.price != stored_price:
            log.warning(
                f"{log_prefix} Abgelehnt: Preis für {item.product_id} weicht ab "
                f"(Client {item.price}, DB {stored_price})."
            )
            raise ValidationError("Totals do not align with current product pricing.")

    # --- 4. Bestand prüfen ---
    for product_id, qty in quantities.items():
        product = products[product_id]
        if qty > product.quantity:
            log.warning(f"{log_prefix} Abgelehnt: {qty} x {product_id} angefragt, {product.quantity} auf Lager.")
            raise InsufficientStockError(f"Insufficient stock for {product.name}.")

    # --- 5. Vertrauenswürdige Summe ---
    total = compute_trusted_total(cart, products)
    line_items = build_line_items(cart, products)

    # --- 6. Zahlung (Gateway) ---
    log.info(f"{log_prefix} Schritt 6: Belaste Gateway mit {total}...")
    try:
        charge = gateway.charge(total, request.nonce, order_id)
    except httpx.HTTPError as e:
        log.error(f"{log_prefix} Gateway-Fehler, Checkout abgebrochen: {e}")
        raise PaymentError("Payment could not be processed.") from e

    if not charge.success:
        log.error(f"{log_prefix} Zahlung fehlgeschlagen: {charge.error}")
        raise PaymentError()

    log.info(f"{log_prefix} Zahlung erfolgreich. (TxID: {charge.transaction_id})")

    # --- 7. + 8. Bestand abbuchen und Bestellung anlegen (eine Transaktion) ---
    ledger = OrderLedger(session)
    try:
        for product_id, qty in quantities.items():
            if not inventory.conditional_decrement(product_id, qty):
                session.rollback()
                log.critical(
                    f"{log_prefix} KRITISCH: Bestand während Checkout verändert ({product_id}). "
                    f"Zahlung {charge.transaction_id} über {total} erfasst, keine Bestellung. "
                    f"BENÖTIGT MANUELLEN ABGLEICH!"
                )
                raise InsufficientStockError("Stock changed during checkout. Please retry.")

        order = ledger.create(order_id, buyer_id, line_items, total, charge)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        log.critical(
            f"{log_prefix} KRITISCH: Bestellung konnte nicht gespeichert werden ({e}). "
            f"Zahlung {charge.transaction_id} über {total} erfasst. BENÖTIGT MANUELLEN ABGLEICH!"
        )
        raise PersistenceError(transaction_id=charge.transaction_id) from e

    log.info(f"{log_prefix} Checkout erfolgreich abgeschlossen. Bestellung {order.id} gespeichert.")

    return CheckoutResult(
        order=order,
        transaction_id=charge.transaction_id,
        status=charge.status,
        amount=total,
    )
