"""Wishlist commands and handler.

The wishlist is created on the first add. Removing from a missing wishlist
is the same as removing a product that is not in it.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.wishlist.wishlist import Wishlist


@storefront.command(part_of="Wishlist")
class AddToWishlist:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="Wishlist")
class RemoveFromWishlist:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Wishlist)
class ManageWishlistHandler:
    @handle(AddToWishlist)
    def add_to_wishlist(self, command):
        # Raises ObjectNotFoundError for an unknown product
        current_domain.repository_for(Product).get(command.product_id)

        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.for_user(command.user_id) or Wishlist.create(user_id=command.user_id)
        wishlist.add_product(command.product_id)
        repo.add(wishlist)
        return wishlist.products()

    @handle(RemoveFromWishlist)
    def remove_from_wishlist(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.for_user(command.user_id)
        if wishlist is None:
            raise ValidationError({"product_id": ["Product not in wishlist"]})

        wishlist.remove_product(command.product_id)
        repo.add(wishlist)
        return wishlist.products()
