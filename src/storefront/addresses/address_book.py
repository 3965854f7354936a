"""AddressBook aggregate with the Address entity.

The book is the transactional boundary for the "single default address"
rule: every change that moves the default happens inside one
``atomic_change`` block, so the invariant is only checked on the finished
state and two defaults are never observable.
"""

from enum import Enum
from uuid import uuid4

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, HasMany, String

from storefront.domain import storefront

# Record keys in durable storage, keyed by entity field name
RECORD_KEYS = {
    "id": "id",
    "address_type": "type",
    "name": "name",
    "street": "street",
    "city": "city",
    "state": "state",
    "pincode": "pincode",
    "phone": "phone",
    "is_default": "isDefault",
}

EDITABLE_FIELDS = ("address_type", "name", "street", "city", "state", "pincode", "phone")


class AddressType(Enum):
    """Enumeration of address types."""

    HOME = "home"
    WORK = "work"
    OTHER = "other"


@storefront.entity(part_of="AddressBook")
class Address:
    """A saved delivery address.

    Format checks on pincode and phone belong to the form that collects the
    address; the entity only stores what it is given.
    """

    address_type: String(choices=AddressType, default=AddressType.HOME.value)
    name: String(required=True, max_length=50)
    street: String(required=True, max_length=200)
    city: String(required=True, max_length=50)
    state: String(required=True, max_length=50)
    pincode: String(required=True, max_length=6)
    phone: String(required=True, max_length=10)
    is_default: Boolean(default=False)

    def to_record(self) -> dict:
        return {record_key: getattr(self, field) for field, record_key in RECORD_KEYS.items()}


@storefront.aggregate
class AddressBook:
    """All saved addresses of one shopper, in the order they were added."""

    addresses: HasMany(Address)

    @invariant.post
    def exactly_one_default_address_when_addresses_exist(self):
        if not self.addresses:
            return
        defaults = [a for a in self.addresses if a.is_default]
        if len(defaults) != 1:
            raise ValidationError({"addresses": ["Exactly one address must be marked as default"]})

    @classmethod
    def from_records(cls, owner_id, records):
        """Rebuild a book from durable records; raises ValidationError on bad data."""
        addresses = [
            Address(
                **{
                    field: record[record_key]
                    for field, record_key in RECORD_KEYS.items()
                    if record.get(record_key) is not None
                }
            )
            for record in records
        ]
        return cls(id=owner_id, addresses=addresses)

    def to_records(self) -> list[dict]:
        return [address.to_record() for address in self.addresses]

    def find(self, address_id):
        return next((a for a in self.addresses if str(a.id) == str(address_id)), None)

    def _get(self, address_id):
        address = self.find(address_id)
        if address is None:
            raise ValidationError({"addresses": [f"Address {address_id} not found"]})
        return address

    @property
    def default_address(self):
        return next((a for a in self.addresses if a.is_default), None)

    def add_address(
        self,
        name,
        street,
        city,
        state,
        pincode,
        phone,
        address_type=AddressType.HOME.value,
        is_default=False,
    ):
        # First address is always default
        if not self.addresses:
            is_default = True

        with atomic_change(self):
            if is_default:
                for addr in self.addresses:
                    if addr.is_default:
                        addr.is_default = False

            address = Address(
                id=str(uuid4()),
                address_type=address_type,
                name=name,
                street=street,
                city=city,
                state=state,
                pincode=pincode,
                phone=phone,
                is_default=bool(is_default),
            )
            self.add_addresses(address)

        return address

    def update_address(self, address_id, **kwargs):
        address = self._get(address_id)

        unknown = set(kwargs) - set(EDITABLE_FIELDS) - {"is_default"}
        if unknown:
            raise ValidationError({"addresses": [f"Unknown address fields: {', '.join(sorted(unknown))}"]})

        make_default = kwargs.pop("is_default", None)
        if make_default is False and address.is_default:
            raise ValidationError({"is_default": ["Choose another default address first"]})

        with atomic_change(self):
            for field, value in kwargs.items():
                setattr(address, field, value)
            if make_default:
                for addr in self.addresses:
                    if addr.is_default:
                        addr.is_default = False
                address.is_default = True

        return address

    def remove_address(self, address_id):
        address = self._get(address_id)
        was_default = address.is_default

        with atomic_change(self):
            self.remove_addresses(address)

            # Promote the most recently added remaining address
            if was_default and self.addresses:
                self.addresses[-1].is_default = True

        return address

    def set_default_address(self, address_id):
        address = self._get(address_id)

        with atomic_change(self):
            for addr in self.addresses:
                if addr.is_default:
                    addr.is_default = False
            address.is_default = True

        return address
