from typing import List

from .nodes import (
    Block,
    BlockItem,
    BlockStack,
    BroadcastRef,
    ListRef,
    Literal,
    Operation,
    ParsedScratchProject,
    VariableRef,
    WhenBroadcastReceived,
    WhenGreenFlagClicked,
    WhenKeyPressed,
)
from .opcodes import KIND_SLOTS
from .values import force_str

INDENT = "    "


def format_expression(block: Block) -> str:
    if isinstance(block, Literal):
        if isinstance(block.value, str):
            return f"[{block.value}]"
        return f"({force_str(block.value)})"
    if isinstance(block, VariableRef):
        return f"({block.path})"
    if isinstance(block, ListRef):
        return f"({block.path} :: list)"
    if isinstance(block, BroadcastRef):
        return f"[{block.path} v]"
    if isinstance(block, BlockStack):
        return "{...}"
    return f"({format_operation_head(block)})"


def format_operation_head(op: Operation) -> str:
    slots = KIND_SLOTS.get(op.kind, ())
    parts = [op.kind]
    for idx, arg in enumerate(op.args):
        if isinstance(arg, BlockStack):
            continue
        name = slots[idx] if idx < len(slots) else str(idx)
        parts.append(f"{name}={format_expression(arg)}")
    return " ".join(parts)


def generate_block_code(block: Block, indent_level: int = 0) -> str:
    indent = INDENT * indent_level
    if not isinstance(block, Operation):
        return f"{indent}{format_expression(block)}\n"

    result = f"{indent}{format_operation_head(block)}\n"
    stacks = [arg for arg in block.args if isinstance(arg, BlockStack)]
    for idx, stack in enumerate(stacks):
        if idx > 0:
            result += f"{indent}else\n"
        result += generate_stack_code(stack, indent_level + 1)
    if stacks:
        result += f"{indent}end\n"
    return result


def generate_stack_code(stack: BlockStack, indent_level: int = 0) -> str:
    return "".join(generate_block_code(block, indent_level) for block in stack)


def format_trigger(item: BlockItem) -> str:
    if isinstance(item, WhenGreenFlagClicked):
        return "when green flag clicked"
    if isinstance(item, WhenKeyPressed):
        return f"when [{item.key.value} v] key pressed"
    if isinstance(item, WhenBroadcastReceived):
        return f"when I receive [{item.broadcast} v]"
    raise TypeError(f"not a block item: {item!r}")


def generate_items_code(items) -> List[str]:
    lines: List[str] = []
    for item in items:
        lines.append(format_trigger(item) + "\n")
        lines.append(generate_stack_code(item.body, 1))
        lines.append("\n")
    return lines


def generate_project_text(project: ParsedScratchProject) -> str:
    """Readable listing of a resolved project, one section per target."""
    lines: List[str] = ["== Stage\n"]
    for name, (path, value) in project.background.variables.items():
        lines.append(f"var {name} = {force_str(value)!r}  # {path}\n")
    for name, (path, items) in project.background.lists.items():
        lines.append(f"list {name} ({len(items)} items)  # {path}\n")
    for name, path in project.background.broadcasts.items():
        lines.append(f"broadcast {name}  # {path}\n")
    lines.append("\n")
    lines.extend(generate_items_code(project.background.blocks))

    for sprite in project.sprites:
        lines.append(f"== Sprite '{sprite.name}'\n")
        for name, (path, value) in sprite.variables.items():
            lines.append(f"var {name} = {force_str(value)!r}  # {path}\n")
        for name, (path, items) in sprite.lists.items():
            lines.append(f"list {name} ({len(items)} items)  # {path}\n")
        lines.append("\n")
        lines.extend(generate_items_code(sprite.blocks))

    return "".join(lines).rstrip() + "\n"
