"""Error kinds raised by the ordering domain.

All of them are protean ``ValidationError`` subclasses, so they carry the usual
``{field: [messages]}`` payload and map to HTTP 400 through protean's FastAPI
exception handlers (``NotAuthenticated`` gets its own 401 handler).
"""

from protean.exceptions import ValidationError


class NotAuthenticated(ValidationError):
    """A cart or order mutation was attempted without a resolved customer."""

    def __init__(self, messages=None):
        super().__init__(messages or {"customer_id": ["A logged-in customer is required"]})


class InvalidQuantity(ValidationError):
    pass


class ProductInactive(ValidationError):
    pass


class InvalidTransition(ValidationError):
    pass


class InvalidOverrideValue(ValidationError):
    pass


class PartialBulkFailure(ValidationError):
    """Some offer-group price triples in a batch failed while others were written.

    ``results`` holds one dict per submitted triple, in submission order.
    """

    def __init__(self, results):
        self.results = list(results)
        failed = [r for r in self.results if not r["ok"]]
        super().__init__(
            {
                "prices": [
                    f"{r['product_id']}/{r['offer_group_id']}: {r['error']}" for r in failed
                ]
            }
        )

    @property
    def failed(self):
        return [r for r in self.results if not r["ok"]]

    @property
    def succeeded(self):
        return [r for r in self.results if r["ok"]]
