"""Shopper registration and login: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.leads.shopper import LeadSource, Shopper, ShopperRole


@storefront.command(part_of="Shopper")
class RegisterShopper:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)
    source = String(choices=LeadSource, default=LeadSource.DIRECT.value)
    role = String(choices=ShopperRole, default=ShopperRole.USER.value)


@storefront.command(part_of="Shopper")
class LogIn:
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=Shopper)
class ShopperAccountHandler:
    @handle(RegisterShopper)
    def register_shopper(self, command):
        repo = current_domain.repository_for(Shopper)

        email = command.email.strip().lower()
        existing = repo._dao.query.filter(email=email).all()
        if existing.items:
            raise ValidationError({"email": ["User already exists"]})

        shopper = Shopper.register(
            name=command.name,
            email=email,
            phone=command.phone,
            source=command.source,
            role=command.role,
        )
        repo.add(shopper)
        return str(shopper.id)

    @handle(LogIn)
    def log_in(self, command):
        repo = current_domain.repository_for(Shopper)
        shopper = repo.get(command.user_id)
        if not shopper.is_active:
            raise ValidationError({"user": ["Account is deactivated"]})

        shopper.record_login()
        repo.add(shopper)
