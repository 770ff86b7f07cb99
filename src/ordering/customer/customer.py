"""Customer aggregate: a company account ordering wholesale goods.

Authentication lives outside this context; a customer here is the priced
party: contact details for the order snapshot and membership in exactly one
discount group.
"""

import re
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String

from ordering.customer.events import CustomerRegistered, DiscountGroupAssigned
from ordering.domain import ordering

_CVR = re.compile(r"^\d{8}$")


@ordering.aggregate
class Customer:
    company_name = String(required=True, max_length=255)
    contact_name = String(max_length=255)
    email = String(required=True, max_length=254)
    phone = String(max_length=20)
    cvr = String(max_length=8)  # Danish company registration number
    discount_group_id = Identifier(required=True)
    registered_at = DateTime()

    @invariant.post
    def email_must_look_valid(self):
        if self.email.count("@") != 1 or " " in self.email:
            raise ValidationError({"email": [f"Invalid email address: {self.email!r}"]})
        _, domain_part = self.email.split("@", 1)
        if "." not in domain_part:
            raise ValidationError({"email": [f"Invalid email address: {self.email!r}"]})

    @invariant.post
    def cvr_must_be_eight_digits(self):
        if self.cvr and not _CVR.match(self.cvr):
            raise ValidationError({"cvr": ["CVR number must be 8 digits"]})

    @classmethod
    def register(cls, company_name, email, discount_group_id, contact_name=None, phone=None, cvr=None):
        now = datetime.now(UTC)
        customer = cls(
            company_name=company_name,
            contact_name=contact_name,
            email=email,
            phone=phone,
            cvr=cvr,
            discount_group_id=discount_group_id,
            registered_at=now,
        )
        customer.raise_(
            CustomerRegistered(
                customer_id=str(customer.id),
                company_name=company_name,
                email=email,
                discount_group_id=str(discount_group_id),
                registered_at=now,
            )
        )
        return customer

    def assign_discount_group(self, discount_group_id):
        if str(self.discount_group_id) == str(discount_group_id):
            return

        previous = self.discount_group_id
        self.discount_group_id = discount_group_id
        self.raise_(
            DiscountGroupAssigned(
                customer_id=str(self.id),
                previous_group_id=str(previous) if previous else None,
                discount_group_id=str(discount_group_id),
                assigned_at=datetime.now(UTC),
            )
        )
