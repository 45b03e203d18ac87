"""
Deal session presentation.

Turns the comma-separated "expand" parameter into explicit loading flags
and maps session rows to the representation returned by the API. Every
key is always present; relations that were not expanded map to None or
an empty list.

Dependencies: training_erp.boundary.db, training_erp.core
System role: Row -> response mapping shared by query and mutation services
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm.interfaces import ORMOption

from training_erp.boundary.db.CRUD.deal_session_crud import session_load_options
from training_erp.boundary.db.models.deal_session_model import DealSessionModel
from training_erp.core.planning.reconciliation import SessionSnapshot
from training_erp.core.planning.rules import decimal_to_number, is_session_empty
from training_erp.core.timezone import to_local_iso

EXPAND_KEYS = ("deal_product", "sala", "formadores", "unidades_moviles")
RESOURCES_SHORTCUT = "resources"


@dataclass(frozen=True)
class ExpandOptions:
    """Which related objects to load and render."""

    deal_product: bool = False
    sala: bool = False
    formadores: bool = False
    unidades_moviles: bool = False

    @classmethod
    def parse(cls, raw: Any) -> "ExpandOptions":
        """
        Build flags from "a,b,c", a list of keys, or None.

        "resources" enables every relation; unknown keys are ignored.
        """
        if raw is None:
            return cls()
        if isinstance(raw, str):
            items: Iterable[Any] = raw.split(",")
        elif isinstance(raw, (list, tuple, set)):
            items = raw
        else:
            items = [raw]

        keys = {str(item).strip().lower() for item in items if item is not None}
        if RESOURCES_SHORTCUT in keys:
            return cls(True, True, True, True)
        return cls(**{key: key in keys for key in EXPAND_KEYS})

    def load_options(self) -> list[ORMOption]:
        return session_load_options(
            deal_product=self.deal_product,
            sala=self.sala,
            formadores=self.formadores,
            unidades_moviles=self.unidades_moviles,
        )


def snapshot_from_model(row: DealSessionModel) -> SessionSnapshot:
    """Project a session row (join rows loaded) onto a SessionSnapshot."""
    return SessionSnapshot(
        session_id=row.session_id,
        deal_product_id=row.deal_product_id,
        created_at=row.created_at,
        start_at=row.start_at,
        end_at=row.end_at,
        sala_id=row.sala_id,
        direccion=row.direccion,
        comentarios=row.comentarios,
        trainer_ids=row.trainer_ids,
        mobile_unit_ids=row.mobile_unit_ids,
    )


def _map_deal_product(row: DealSessionModel) -> dict[str, Any] | None:
    product = row.deal_product
    if product is None:
        return None
    return {
        "id": product.id,
        "code": product.code,
        "name": product.name,
        "hours": decimal_to_number(product.hours),
    }


def _map_sala(row: DealSessionModel) -> dict[str, Any] | None:
    sala = row.sala
    if sala is None:
        return None
    return {"sala_id": sala.sala_id, "name": sala.name, "sede": sala.sede}


def _map_trainers(row: DealSessionModel) -> list[dict[str, Any]]:
    return [
        {
            "trainer_id": link.trainer_id,
            "name": link.trainer.name if link.trainer is not None else None,
            "activo": link.trainer.activo if link.trainer is not None else False,
        }
        for link in row.trainers
    ]


def _map_mobile_units(row: DealSessionModel) -> list[dict[str, Any]]:
    mapped = []
    for link in row.mobile_units:
        unit = link.unidad
        mapped.append(
            {
                "unidad_id": link.unidad_id,
                "name": unit.name if unit is not None else None,
                "matricula": unit.matricula if unit is not None else None,
                "tipo": list(unit.tipo or []) if unit is not None else [],
                "sede": list(unit.sede or []) if unit is not None else [],
            }
        )
    return mapped


def map_session(
    row: DealSessionModel,
    expand: ExpandOptions,
    empty_ids: set[str] | None = None,
    exceeding_ids: set[str] | None = None,
) -> dict[str, Any]:
    """
    Map a session row to its API representation.

    Args:
        row: Session loaded with expand.load_options()
        expand: Relations to render
        empty_ids: Precomputed empty sessions (recomputed from the row if None)
        exceeding_ids: Sessions flagged as exceeding their product quantity

    Returns:
        Representation dict with every key present
    """
    if empty_ids is not None:
        is_empty = row.session_id in empty_ids
    else:
        is_empty = is_session_empty(
            row.start_at,
            row.end_at,
            row.sala_id,
            row.direccion,
            row.comentarios,
            row.trainer_ids,
            row.mobile_unit_ids,
        )

    deal_product = _map_deal_product(row) if expand.deal_product else None

    return {
        "session_id": row.session_id,
        "deal_id": row.deal_id,
        "deal_product_id": row.deal_product_id,
        "deal_product": deal_product,
        "inicio": to_local_iso(row.start_at),
        "fin": to_local_iso(row.end_at),
        "sala_id": row.sala_id,
        "sala": _map_sala(row) if expand.sala else None,
        "formadores": _map_trainers(row) if expand.formadores else [],
        "unidades_moviles": _map_mobile_units(row) if expand.unidades_moviles else [],
        "direccion": row.direccion,
        "sede": row.sede,
        "comentarios": row.comentarios,
        "estado": row.status.value if row.status is not None else None,
        "origen": {
            "deal_product_id": row.deal_product_id,
            "code": deal_product["code"] if deal_product else row.origen,
        },
        "created_at": to_local_iso(row.created_at),
        "updated_at": to_local_iso(row.updated_at),
        "is_empty": is_empty,
        "is_exceeding_quantity": bool(exceeding_ids and row.session_id in exceeding_ids),
    }
