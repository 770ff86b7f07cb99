"""Customer registration and discount-group membership: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.customer.customer import Customer
from ordering.discount.discount_group import DiscountGroup
from ordering.domain import ordering


@ordering.command(part_of="Customer")
class RegisterCustomer:
    """Create a customer account; without a group the customer joins Standard."""

    company_name = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    contact_name = String(max_length=255)
    phone = String(max_length=20)
    cvr = String(max_length=8)
    discount_group_id = Identifier()


@ordering.command(part_of="Customer")
class AssignDiscountGroup:
    customer_id = Identifier(required=True)
    discount_group_id = Identifier(required=True)


@ordering.command_handler(part_of=Customer)
class ManageCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        groups = current_domain.repository_for(DiscountGroup)
        if command.discount_group_id:
            group = groups.get(command.discount_group_id)
        else:
            group = groups.standard()

        customer = Customer.register(
            company_name=command.company_name,
            email=command.email,
            discount_group_id=str(group.id),
            contact_name=command.contact_name,
            phone=command.phone,
            cvr=command.cvr,
        )
        current_domain.repository_for(Customer).add(customer)
        return str(customer.id)

    @handle(AssignDiscountGroup)
    def assign_discount_group(self, command):
        group = current_domain.repository_for(DiscountGroup).get(command.discount_group_id)
        if not group.is_active:
            raise ValidationError({"discount_group_id": ["Cannot assign an inactive discount group"]})

        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.assign_discount_group(str(group.id))
        repo.add(customer)
