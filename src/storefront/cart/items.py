"""Cart line management: commands and handler.

Carts are addressed by their owner. ``AddCartLine`` creates the cart on
first use; the other commands fail with ``ObjectNotFoundError`` when the user
has no cart. Stock is peeked, never reserved.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import logger, storefront
from storefront.errors import InsufficientStock


@storefront.command(part_of="Cart")
class AddCartLine:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1)
    size = String(max_length=20)
    color = String(max_length=50)


@storefront.command(part_of="Cart")
class SetCartLineQuantity:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveCartLine:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


def _check_stock(product, quantity):
    if product.available_quantity < quantity:
        raise InsufficientStock(product.name, product.available_quantity)


def _cart_for(repo, user_id):
    cart = repo.for_user(user_id)
    if cart is None:
        raise ObjectNotFoundError("Cart not found")
    return cart


@storefront.command_handler(part_of=Cart)
class ManageCartLinesHandler:
    @handle(AddCartLine)
    def add_cart_line(self, command):
        if command.quantity is None or command.quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        product = current_domain.repository_for(Product).get(command.product_id)
        _check_stock(product, command.quantity)

        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            cart = Cart.create(user_id=command.user_id)
            logger.info("Cart created", user_id=str(command.user_id))

        line = cart.add_line(
            product_id=command.product_id,
            quantity=command.quantity,
            price=product.price,
            size=command.size,
            color=command.color,
        )
        repo.add(cart)
        return str(line.id)

    @handle(SetCartLineQuantity)
    def set_cart_line_quantity(self, command):
        if command.quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be greater than 0"]})

        repo = current_domain.repository_for(Cart)
        cart = _cart_for(repo, command.user_id)
        line = cart.find_line(command.line_id)

        product = current_domain.repository_for(Product).get(line.product_id)
        _check_stock(product, command.quantity)

        cart.set_quantity(line.id, command.quantity, current_price=product.price)
        repo.add(cart)

    @handle(RemoveCartLine)
    def remove_cart_line(self, command):
        repo = current_domain.repository_for(Cart)
        cart = _cart_for(repo, command.user_id)
        cart.remove_line(command.line_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            return False
        repo._dao.delete(cart)
        logger.info("Cart cleared", user_id=str(command.user_id), cart_id=str(cart.id))
        return True
