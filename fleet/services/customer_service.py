"""Customer records referenced by reservations."""
from typing import Optional

from fleet.events import emit_customer
from fleet.models.customer import Customer
from fleet.models.store import Store
from fleet.services.common import get_customer_or_raise, require_text, resolve_store


class CustomerService:

    @staticmethod
    def create_customer(payload: dict, store: Optional[Store] = None) -> Customer:
        st = resolve_store(store)
        name = require_text(payload, "name")
        with st.transaction():
            cid = st.create_customer({
                "name": name,
                "email": (payload.get("email") or "").strip() or None,
                "phone": (payload.get("phone") or "").strip() or None,
            })
        emit_customer(CustomerService, "created", cid)
        return get_customer_or_raise(st, cid)

    @staticmethod
    def get_customer(cid: str, store: Optional[Store] = None) -> Customer:
        return get_customer_or_raise(resolve_store(store), cid)

    @staticmethod
    def all_customers(store: Optional[Store] = None) -> list[Customer]:
        st = resolve_store(store)
        return sorted((Customer.from_dict(d) for d in st.customers.values()), key=lambda c: c.name.lower())
