"""
Modal / interaction state for the add and edit flows.

Every transition returns a fresh ModalState so a closed modal never carries
prefill data or an editing id into the next open.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AddPrefill:
    """Stock carried over from a quick-add action"""
    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None


@dataclass(frozen=True)
class ModalState:
    is_add_open: bool = False
    is_edit_open: bool = False
    editing_holding_id: Optional[str] = None
    add_prefill: Optional[AddPrefill] = None

    def open_add(self, prefill: Optional[AddPrefill] = None) -> "ModalState":
        return ModalState(is_add_open=True, add_prefill=prefill)

    def close_add(self) -> "ModalState":
        return ModalState(
            is_edit_open=self.is_edit_open,
            editing_holding_id=self.editing_holding_id,
        )

    def open_edit(self, holding_id: str) -> "ModalState":
        return ModalState(is_edit_open=True, editing_holding_id=holding_id)

    def close_edit(self) -> "ModalState":
        return ModalState(
            is_add_open=self.is_add_open,
            add_prefill=self.add_prefill,
        )


CLOSED_MODALS = ModalState()
