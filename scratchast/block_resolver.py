"""Turn one target's flat, id-indexed block map into resolved BlockItems.

Scripts start at top-level trigger blocks. Their ``next`` chains become
BlockStacks, input slots are resolved recursively and substack slots become
nested BlockStacks. The ids on the current resolution path are tracked, so a
chain or input that leads back to one of them raises CyclicBlockChain instead
of looping.
"""

from typing import List, Optional, Set, Tuple

from .constants import (
    BROADCAST_FIELD,
    KEY_FIELD,
    LIST_FIELD,
    TRIGGER_OPCODES,
    VARIABLE_FIELD,
    WHEN_BROADCAST_RECEIVED,
    WHEN_FLAG_CLICKED,
    WHEN_KEY_PRESSED,
)
from .diagnostics import DiagnosticContext
from .errors import CyclicBlockChain, InvalidInputFormat, InvalidProjectFormat
from .nodes import (
    Block,
    BlockItem,
    BlockStack,
    BroadcastRef,
    KeyId,
    ListRef,
    Literal,
    Operation,
    VariableRef,
    WhenBroadcastReceived,
    WhenGreenFlagClicked,
    WhenKeyPressed,
    ZERO_PLACEHOLDER,
)
from .opcodes import MENU_OPCODES, REFERENCE_REPORTERS, OpSpec, lookup_operator, normalize_opcode
from .raw_model import (
    BlockRef,
    BroadcastPayload,
    EmptyPayload,
    ListPayload,
    LiteralPayload,
    RawBlock,
    RawField,
    RawInputPayload,
    RawTarget,
    VariablePayload,
)
from .scope import Scope
from .values import force_str

# Default for an empty boolean slot
EMPTY_CONDITION = Literal(False)


class BlockResolver:
    def __init__(self, target: RawTarget, scope: Scope, diagnostics: DiagnosticContext) -> None:
        self.target = target
        self.blocks = target.blocks
        self.scope = scope
        self.diagnostics = diagnostics
        self._path: Set[str] = set()

    def resolve(self) -> Tuple[BlockItem, ...]:
        """Resolve every supported top-level script, in block map order."""
        items: List[BlockItem] = []
        for block_id, block in self.blocks.items():
            if not block.top_level:
                continue
            if block.opcode not in TRIGGER_OPCODES:
                self.diagnostics.info("Skipped top-level script with unsupported trigger", block_id, block.opcode)
                continue
            try:
                items.append(self.resolve_trigger(block_id, block))
            except RecursionError:
                raise InvalidProjectFormat(
                    f"target {self.target.name!r} script {block_id!r}: block nesting too deep"
                ) from None
        return tuple(items)

    def resolve_trigger(self, block_id: str, block: RawBlock) -> BlockItem:
        self._enter(block_id)
        if block.opcode == WHEN_FLAG_CLICKED:
            item: BlockItem = WhenGreenFlagClicked(self.walk_chain(block.next))
        elif block.opcode == WHEN_KEY_PRESSED:
            key = self._key_option(block_id, block)
            item = WhenKeyPressed(key, self.walk_chain(block.next))
        elif block.opcode == WHEN_BROADCAST_RECEIVED:
            field = self._field(block_id, block, BROADCAST_FIELD)
            broadcast = self.scope.resolve_broadcast(self._field_name(field), self._field_ref(block_id, field))
            item = WhenBroadcastReceived(broadcast, self.walk_chain(block.next))
        else:
            raise InvalidProjectFormat(f"block {block_id!r}: {block.opcode!r} is not a trigger")
        self._leave(block_id)
        return item

    def walk_chain(self, start_id: Optional[str]) -> BlockStack:
        """Follow ``next`` links from ``start_id`` and translate every block on the way."""
        visited: List[str] = []
        resolved: List[Block] = []
        current = start_id
        while current is not None:
            self._enter(current)
            visited.append(current)
            block = self._lookup(current)
            resolved.append(self.translate(current, block))
            current = block.next
        for block_id in visited:
            self._leave(block_id)
        return BlockStack(tuple(resolved))

    def translate(self, block_id: str, block: RawBlock) -> Block:
        opcode = normalize_opcode(block.opcode)

        if opcode in REFERENCE_REPORTERS:
            return self.resolve_field(block_id, block, REFERENCE_REPORTERS[opcode])

        if opcode in MENU_OPCODES:
            field = self._field(block_id, block, MENU_OPCODES[opcode])
            return Literal(field.value if field.value is not None else "")

        spec = lookup_operator(opcode)
        if spec is None:
            self.diagnostics.warning("Unknown block replaced with 0", block_id, block.opcode)
            return ZERO_PLACEHOLDER

        args: List[Block] = []
        for slot in spec.inputs:
            args.append(self.resolve_input(block_id, block, slot, spec))
        for slot in spec.fields:
            args.append(self.resolve_field(block_id, block, slot))
        for slot in spec.substacks:
            args.append(self.resolve_substack(block_id, block, slot))
        return Operation(spec.kind, tuple(args))

    def resolve_input(self, block_id: str, block: RawBlock, slot: str, spec: OpSpec) -> Block:
        raw_input = block.inputs.get(slot)
        payload = raw_input.effective if raw_input is not None else None
        if payload is None or isinstance(payload, EmptyPayload):
            if slot in spec.optional:
                return EMPTY_CONDITION
            raise InvalidInputFormat(
                f"target {self.target.name!r} block {block_id!r} ({block.opcode}) is missing input {slot!r}"
            )
        return self.resolve_payload(payload)

    def resolve_substack(self, block_id: str, block: RawBlock, slot: str) -> BlockStack:
        raw_input = block.inputs.get(slot)
        if raw_input is None:
            return BlockStack()
        payload = raw_input.effective
        if isinstance(payload, EmptyPayload):
            return BlockStack()
        if not isinstance(payload, BlockRef):
            raise InvalidInputFormat(
                f"target {self.target.name!r} block {block_id!r} substack {slot!r} must reference a block"
            )
        return self.walk_chain(payload.block_id)

    def resolve_payload(self, payload: RawInputPayload) -> Block:
        if isinstance(payload, BlockRef):
            return self.resolve_reporter(payload.block_id)
        if isinstance(payload, LiteralPayload):
            return Literal(payload.value)
        if isinstance(payload, BroadcastPayload):
            return BroadcastRef(self.scope.resolve_broadcast(payload.name, payload.broadcast_id))
        if isinstance(payload, VariablePayload):
            return VariableRef(self.scope.resolve_variable(payload.name, payload.variable_id))
        if isinstance(payload, ListPayload):
            return ListRef(self.scope.resolve_list(payload.name, payload.list_id))
        raise InvalidInputFormat(f"target {self.target.name!r}: unexpected payload {payload!r}")

    def resolve_reporter(self, block_id: str) -> Block:
        """Resolve a block sitting in an input slot; its ``next`` link is not followed."""
        self._enter(block_id)
        result = self.translate(block_id, self._lookup(block_id))
        self._leave(block_id)
        return result

    def resolve_field(self, block_id: str, block: RawBlock, slot: str) -> Block:
        field = self._field(block_id, block, slot)
        name = self._field_name(field)
        if slot == VARIABLE_FIELD:
            return VariableRef(self.scope.resolve_variable(name, self._field_ref(block_id, field)))
        if slot == LIST_FIELD:
            return ListRef(self.scope.resolve_list(name, self._field_ref(block_id, field)))
        if slot == BROADCAST_FIELD:
            return BroadcastRef(self.scope.resolve_broadcast(name, self._field_ref(block_id, field)))
        return Literal(field.value if field.value is not None else "")

    def _key_option(self, block_id: str, block: RawBlock) -> KeyId:
        option = self._field_name(self._field(block_id, block, KEY_FIELD))
        key = KeyId.from_option(option)
        if key is None:
            raise InvalidInputFormat(f"target {self.target.name!r} block {block_id!r}: unknown key {option!r}")
        return key

    def _field(self, block_id: str, block: RawBlock, slot: str) -> RawField:
        field = block.fields.get(slot)
        if field is None:
            raise InvalidInputFormat(
                f"target {self.target.name!r} block {block_id!r} ({block.opcode}) is missing field {slot!r}"
            )
        return field

    def _field_ref(self, block_id: str, field: RawField) -> str:
        if field.ref_id is None:
            raise InvalidInputFormat(
                f"target {self.target.name!r} block {block_id!r}: field {field.value!r} carries no id"
            )
        return field.ref_id

    @staticmethod
    def _field_name(field: RawField) -> str:
        return force_str(field.value) if field.value is not None else ""

    def _lookup(self, block_id: str) -> RawBlock:
        block = self.blocks.get(block_id)
        if block is None:
            raise InvalidProjectFormat(f"target {self.target.name!r}: reference to missing block {block_id!r}")
        return block

    def _enter(self, block_id: str) -> None:
        if block_id in self._path:
            raise CyclicBlockChain(block_id, self.target.name)
        self._path.add(block_id)

    def _leave(self, block_id: str) -> None:
        self._path.discard(block_id)


def resolve_target_blocks(
    target: RawTarget, scope: Scope, diagnostics: DiagnosticContext
) -> Tuple[BlockItem, ...]:
    return BlockResolver(target, scope, diagnostics).resolve()
