"""
Admin Workflow Controller: form open/submit for the admin console.
Validate -> sanitise -> persist; a validation failure never reaches the store.
Manifest creates carry a WhatsApp notice the admin can open (fire-and-forget).
"""

import enum
import logging
import random
from dataclasses import dataclass

from jaybesin.config import settings as app_settings
from jaybesin.core.messages import Notification, shipment_notification
from jaybesin.core.shipment_record import (
    DEFAULT_DESTINATION, DEFAULT_MODE, DEFAULT_ORIGIN, Shipment, ShipmentValidationError,
    build_shipment_payload, generate_tracking_number, sanitize_product, sanitize_vehicle,
    validate_shipment_form,
)
from jaybesin.core.stages import INITIAL_STAGE, is_valid_stage
from jaybesin.store.document_store import DocumentStore, DuplicateKeyError, PersistenceError

logger = logging.getLogger(__name__)


class FormType(str, enum.Enum):
    MANIFEST = "manifest"
    PRODUCT = "product"
    VEHICLE = "vehicle"


class FormMode(str, enum.Enum):
    CREATE = "create"
    EDIT = "edit"


FORM_COLLECTIONS = {
    FormType.MANIFEST: "shipments",
    FormType.PRODUCT: "products",
    FormType.VEHICLE: "vehicles",
}


@dataclass
class SubmitResult:
    id: str
    entity: dict
    notification: Notification | None = None


class AdminWorkflowController:
    """Admin form handling over a DocumentStore"""

    def __init__(
        self,
        store: DocumentStore,
        tracking_domain: str | None = None,
        default_rate: float | None = None,
        max_tracking_attempts: int | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.tracking_domain = tracking_domain or app_settings.TRACKING_DOMAIN
        self.default_rate = default_rate if default_rate is not None else app_settings.DEFAULT_RATE_PER_CBM
        self.max_tracking_attempts = max_tracking_attempts or app_settings.TRACKING_ID_MAX_ATTEMPTS
        self._rng = rng

    # ── open ──

    def open_form(self, form_type: FormType, mode: FormMode, existing: dict | None = None) -> dict:
        """Blank defaults for create, a copy of the record for edit."""
        form_type, mode = FormType(form_type), FormMode(mode)
        if mode == FormMode.EDIT:
            if existing is None:
                raise ShipmentValidationError({"id": "Nothing to edit"})
            return dict(existing)

        if form_type == FormType.MANIFEST:
            return {
                "tracking_number": generate_tracking_number(self._rng),
                "date_received": "",
                "status": INITIAL_STAGE,
                "origin": DEFAULT_ORIGIN,
                "destination": DEFAULT_DESTINATION,
                "mode": DEFAULT_MODE,
                "consignee_name": "",
                "consignee_phone": "",
                "consignee_address": "",
                "container_id": "",
                "rate_per_cbm": self.default_rate,
                "shipping_fee": 0.0,
                "items": [{"description": "", "quantity": 1, "cbm": 0.0, "weight": 0.0}],
            }
        if form_type == FormType.PRODUCT:
            return sanitize_product({})
        return sanitize_vehicle({})

    # ── submit ──

    async def submit(
        self,
        form_type: FormType,
        mode: FormMode,
        form: dict,
        entity_id: str | None = None,
    ) -> SubmitResult:
        form_type, mode = FormType(form_type), FormMode(mode)
        collection = FORM_COLLECTIONS[form_type]
        if mode == FormMode.EDIT and not entity_id:
            raise ShipmentValidationError({"id": "An id is required to edit"})

        if form_type == FormType.MANIFEST:
            validate_shipment_form(form)
            payload = build_shipment_payload(form)
        elif form_type == FormType.PRODUCT:
            payload = sanitize_product(form)
        else:
            payload = sanitize_vehicle(form)

        if mode == FormMode.EDIT:
            if form_type == FormType.MANIFEST:
                await self._check_tracking_edit(entity_id, payload)
            await self.store.update(collection, entity_id, payload)
            logger.info(f"[Admin] {form_type.value} {entity_id} updated")
            return SubmitResult(id=entity_id, entity={**payload, "id": entity_id})

        notification = None
        if form_type == FormType.MANIFEST:
            doc_id, payload = await self._create_shipment(payload)
        else:
            doc_id = await self.store.create(collection, payload)
        entity = {**payload, "id": doc_id}
        if form_type == FormType.MANIFEST:
            notification = shipment_notification(Shipment.from_document(entity), self.tracking_domain)
        logger.info(f"[Admin] {form_type.value} {doc_id} created")
        return SubmitResult(id=doc_id, entity=entity, notification=notification)

    async def _create_shipment(self, payload: dict) -> tuple[str, dict]:
        """
        Persist under the candidate tracking number if free, otherwise draw new
        numbers. The unique index on tracking_number decides between concurrent
        submits: the loser gets DuplicateKeyError and draws again.
        """
        number = payload["tracking_number"] or generate_tracking_number(self._rng)
        for attempt in range(self.max_tracking_attempts):
            if attempt:
                number = generate_tracking_number(self._rng)
            if await self.store.exists("shipments", "tracking_number", number):
                logger.warning(f"[Admin] Tracking number {number} taken, regenerating")
                continue
            candidate = {**payload, "tracking_number": number}
            try:
                return await self.store.create("shipments", candidate), candidate
            except DuplicateKeyError:
                logger.warning(f"[Admin] Tracking number {number} claimed concurrently, regenerating")
        raise PersistenceError(
            "create", "shipments",
            f"no free tracking number after {self.max_tracking_attempts} attempts",
        )

    async def _check_tracking_edit(self, entity_id: str, payload: dict):
        current = await self.store.get("shipments", entity_id)
        if current is None:
            raise PersistenceError("update", "shipments", f"no document {entity_id}", not_found=True)
        number = payload["tracking_number"]
        if not number:
            payload["tracking_number"] = current.get("tracking_number") or ""
        elif number != current.get("tracking_number") and await self.store.exists(
            "shipments", "tracking_number", number,
        ):
            raise ShipmentValidationError({"tracking_number": f"{number} is already in use"})

    # ── bulk / delete ──

    async def bulk_apply(self, ids: list[str], new_status: str) -> int:
        """Move every selected shipment to new_status in one write."""
        if not is_valid_stage(new_status):
            raise ShipmentValidationError({"status": f"Unknown stage: {new_status}"})
        ids = list(dict.fromkeys(ids))
        if not ids:
            return 0
        count = await self.store.bulk_update("shipments", ids, {"status": new_status})
        logger.info(f"[Admin] {count} shipments -> {new_status}")
        return count

    async def delete(self, form_type: FormType, entity_id: str):
        await self.store.delete(FORM_COLLECTIONS[FormType(form_type)], entity_id)
