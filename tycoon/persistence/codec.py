from __future__ import annotations

import dataclasses
import typing
from typing import Any, Dict

from pydantic import TypeAdapter, ValidationError

from tycoon.core.ledger import Ledger
from tycoon.utils.logger import logs

"""
{#!filepath: tycoon/persistence/codec.py}

LedgerCodec

Ledger <-> JSON-safe dict（pydantic TypeAdapter，Decimal 以字符串保存）

from_dict 的修复语义：
- 整体校验通过 → 直接返回
- 否则逐字段校验：坏字段 → 默认值 + warning；未知字段忽略
- 永远返回一个 Ledger，不抛异常
"""

SCHEMA_VERSION = 1


class LedgerCodec:
    def __init__(self):
        self._adapter = TypeAdapter(Ledger)
        hints = typing.get_type_hints(Ledger)
        self._fields = {f.name: f for f in dataclasses.fields(Ledger)}
        self._field_adapters = {name: TypeAdapter(hints[name]) for name in self._fields}

    def to_dict(self, ledger: Ledger) -> Dict[str, Any]:
        data = self._adapter.dump_python(ledger, mode="json")
        data["schema_version"] = SCHEMA_VERSION
        return data

    def from_dict(self, data: Dict[str, Any]) -> Ledger:
        payload = {k: v for k, v in data.items() if k in self._fields}
        unknown = sorted(set(data) - set(self._fields) - {"schema_version"})
        if unknown:
            logs.warning(f"[Save] ignoring unknown fields: {unknown}")

        try:
            return self._adapter.validate_python(payload)
        except ValidationError:
            logs.warning("[Save] snapshot failed validation, repairing field by field")

        repaired: Dict[str, Any] = {}
        for name, value in payload.items():
            try:
                repaired[name] = self._field_adapters[name].validate_python(value)
            except ValidationError as e:
                logs.warning(f"[Save] field '{name}' invalid, using default ({e.error_count()} errors)")

        return Ledger(**repaired)
