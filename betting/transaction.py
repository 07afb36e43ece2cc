"""
Programmable transaction block model.

Mirrors the JSON shape wallets accept for an unsigned Sui transaction
(inputs + commands + gas data). Object inputs stay unresolved; the wallet
fills in versions and digests when it serializes and signs.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .bcs import SerializedPure

Argument = Dict[str, Any]

GAS_COIN: Argument = {"$kind": "GasCoin", "GasCoin": True}


class TransactionBlock:
    """Unsigned programmable transaction under construction."""

    def __init__(self, sender: Optional[str] = None):
        self.sender = sender
        self.gas_budget: Optional[int] = None
        self.gas_payment: List[str] = []
        self.inputs: List[Dict[str, Any]] = []
        self.commands: List[Dict[str, Any]] = []
        self._object_inputs: Dict[str, int] = {}

    @property
    def gas(self) -> Argument:
        return GAS_COIN

    def set_sender(self, sender: str) -> None:
        self.sender = sender

    def set_gas_budget(self, budget_mist: int) -> None:
        if budget_mist <= 0:
            raise ValueError("gas budget must be positive")
        self.gas_budget = budget_mist

    def set_gas_payment(self, coin_ids: List[str]) -> None:
        self.gas_payment = list(coin_ids)

    def object(self, object_id: str) -> Argument:
        """Reference an on-chain object; repeated references share one input."""
        if object_id in self._object_inputs:
            index = self._object_inputs[object_id]
        else:
            index = len(self.inputs)
            self.inputs.append({"$kind": "UnresolvedObject", "UnresolvedObject": {"objectId": object_id}})
            self._object_inputs[object_id] = index
        return {"$kind": "Input", "Input": index, "type": "object"}

    def pure(self, value: SerializedPure) -> Argument:
        index = len(self.inputs)
        self.inputs.append({
            "$kind": "Pure",
            "Pure": {"bytes": value.to_base64(), "type": value.type_tag},
        })
        return {"$kind": "Input", "Input": index, "type": "pure"}

    def split_coins(self, coin: Argument, amounts: List[Argument]) -> List[Argument]:
        index = self._add_command({"$kind": "SplitCoins", "SplitCoins": {"coin": coin, "amounts": amounts}})
        return [{"$kind": "NestedResult", "NestedResult": [index, i]} for i in range(len(amounts))]

    def move_call(self, target: str, arguments: List[Argument],
                  type_arguments: Optional[List[str]] = None) -> Argument:
        package, module, function = target.split("::")
        index = self._add_command({
            "$kind": "MoveCall",
            "MoveCall": {
                "package": package,
                "module": module,
                "function": function,
                "typeArguments": list(type_arguments or []),
                "arguments": arguments,
            },
        })
        return {"$kind": "Result", "Result": index}

    def _add_command(self, command: Dict[str, Any]) -> int:
        self.commands.append(command)
        return len(self.commands) - 1

    def move_calls(self) -> List[Dict[str, Any]]:
        return [c["MoveCall"] for c in self.commands if c["$kind"] == "MoveCall"]

    def input_at(self, argument: Argument) -> Dict[str, Any]:
        return self.inputs[argument["Input"]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": 2,
            "sender": self.sender,
            "expiration": None,
            "gasData": {
                "budget": str(self.gas_budget) if self.gas_budget is not None else None,
                "price": None,
                "owner": None,
                "payment": [{"objectId": coin_id} for coin_id in self.gas_payment] or None,
            },
            "inputs": self.inputs,
            "commands": self.commands,
        }
