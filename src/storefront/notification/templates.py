"""Transactional email templates for order events.

Each template renders a subject and plain-text body from event context.
"""


def _money(value) -> str:
    return f"{float(value or 0):.2f}"


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_code = context.get("order_code", "N/A")
        total = _money(context.get("total_price"))
        method = context.get("payment_method", "COD")
        payment_line = (
            "You chose cash on delivery; please keep the amount ready."
            if method == "COD"
            else "Complete the online payment to confirm your order."
        )
        return {
            "subject": f"Order Placed - #{order_code}",
            "body": (
                f"Thank you for your order #{order_code}.\n\n"
                f"Order total: {total}\n"
                f"{payment_line}\n\n"
                "We will let you know when it has been delivered."
            ),
        }


class PaymentReceiptTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_code = context.get("order_code", "N/A")
        total = _money(context.get("total_price"))
        payment_id = context.get("payment_id", "N/A")
        return {
            "subject": f"Payment Receipt - #{order_code}",
            "body": (
                f"Payment of {total} has been received for order #{order_code}.\n"
                f"Payment reference: {payment_id}\n\n"
                "This is your official payment receipt.\n\n"
                "Thank you for your purchase!"
            ),
        }


class ReturnConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_code = context.get("order_code", "N/A")
        return {
            "subject": f"Return Confirmed - #{order_code}",
            "body": (
                f"We have recorded the return of order #{order_code}.\n\n"
                "Any refund due will be processed to your original payment method."
            ),
        }
