"""Serialization and deserialization utilities for canonical trade records."""

import json
from datetime import date
from typing import Any

from ..models.enums import CounterpartyRole
from ..models.trade import (
    CanonicalTradeRecord,
    Counterparty,
    Party,
    PartyIdentifier,
    TradeIdentifier,
)


class RecordSerializer:
    """
    Handles serialization and deserialization of CanonicalTradeRecord.

    Output is canonical (sorted keys) so two equal records serialize to
    byte-for-byte equal JSON, and deserialize(serialize(record)) == record.
    """

    @staticmethod
    def serialize(record: CanonicalTradeRecord) -> str:
        """
        Serialize a CanonicalTradeRecord to JSON string.

        Args:
            record: The record to serialize.

        Returns:
            Canonical JSON string representation of the record.
        """
        return json.dumps(
            RecordSerializer.record_to_dict(record),
            ensure_ascii=False,
            indent=2,
            sort_keys=True,
        )

    @staticmethod
    def deserialize(json_str: str) -> CanonicalTradeRecord:
        """
        Deserialize a JSON string to a CanonicalTradeRecord.

        Raises:
            ValueError: If the JSON is invalid or malformed.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {str(e)}")

        return RecordSerializer.dict_to_record(data)

    @staticmethod
    def record_to_dict(record: CanonicalTradeRecord) -> dict[str, Any]:
        """Convert CanonicalTradeRecord to dictionary."""
        counterparties = None
        if record.counterparties is not None:
            counterparties = [
                RecordSerializer._counterparty_to_dict(c) for c in record.counterparties
            ]
        return {
            "trade_identifiers": [
                {
                    "identifier_type": i.identifier_type,
                    "assigned_value": i.assigned_value,
                    "issuer": i.issuer,
                }
                for i in record.trade_identifiers
            ],
            "parties": [RecordSerializer._party_to_dict(p) for p in record.parties],
            "counterparties": counterparties,
            "product": record.product,
            "trade_date": record.trade_date.isoformat() if record.trade_date else None,
            "executions": list(record.executions),
            "state": record.state,
        }

    @staticmethod
    def dict_to_record(data: dict[str, Any]) -> CanonicalTradeRecord:
        """Convert dictionary to CanonicalTradeRecord."""
        if not isinstance(data, dict):
            raise ValueError("Expected dictionary for CanonicalTradeRecord")

        counterparties = data.get("counterparties")
        trade_date = data.get("trade_date")
        return CanonicalTradeRecord(
            trade_identifiers=[
                TradeIdentifier(
                    identifier_type=i.get("identifier_type"),
                    assigned_value=i.get("assigned_value"),
                    issuer=i.get("issuer"),
                )
                for i in data.get("trade_identifiers", [])
            ],
            parties=[RecordSerializer._dict_to_party(p) for p in data.get("parties", [])],
            counterparties=(
                [RecordSerializer._dict_to_counterparty(c) for c in counterparties]
                if counterparties is not None
                else None
            ),
            product=data.get("product"),
            trade_date=date.fromisoformat(trade_date) if trade_date else None,
            executions=data.get("executions", []),
            state=data.get("state"),
        )

    @staticmethod
    def _party_to_dict(party: Party) -> dict[str, Any]:
        return {
            "key": party.key,
            "global_key": party.global_key,
            "name": party.name,
            "party_ids": [
                {
                    "identifier_type": pid.identifier_type,
                    "identifier_value": pid.identifier_value,
                }
                for pid in party.party_ids
            ],
        }

    @staticmethod
    def _dict_to_party(data: dict[str, Any]) -> Party:
        if not isinstance(data, dict):
            raise ValueError("Expected dictionary for Party")
        if "key" not in data:
            raise ValueError("Missing required field 'key' in Party")
        return Party(
            key=data["key"],
            party_ids=[
                PartyIdentifier(
                    identifier_type=pid.get("identifier_type"),
                    identifier_value=pid.get("identifier_value"),
                )
                for pid in data.get("party_ids", [])
            ],
            name=data.get("name"),
            global_key=data.get("global_key"),
        )

    @staticmethod
    def _counterparty_to_dict(link: Counterparty) -> dict[str, Any]:
        return {
            "role": link.role.value if link.role else None,
            "party_reference": link.party_reference,
        }

    @staticmethod
    def _dict_to_counterparty(data: dict[str, Any]) -> Counterparty:
        role = data.get("role")
        return Counterparty(
            role=CounterpartyRole(role) if role else None,
            party_reference=data.get("party_reference"),
        )


def serialize_record(record: CanonicalTradeRecord) -> str:
    """Convenience function to serialize a CanonicalTradeRecord."""
    return RecordSerializer.serialize(record)


def deserialize_record(json_str: str) -> CanonicalTradeRecord:
    """Convenience function to deserialize a CanonicalTradeRecord."""
    return RecordSerializer.deserialize(json_str)
