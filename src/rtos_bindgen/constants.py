"""
FreeRTOS Constants Shim Header
==============================

Object-like kernel macros such as portMAX_DELAY expand to expressions the
binding generator either cannot evaluate or types as a plain integer. The
shim header rewrites each one as a typed C constant, so the generated
binding carries the kernel's own type:

    #ifdef portMAX_DELAY
    static const TickType_t __portMAX_DELAY_UNDEF__ = portMAX_DELAY;
    #undef portMAX_DELAY
    const TickType_t portMAX_DELAY = __portMAX_DELAY_UNDEF__;
    #endif

Each block is guarded, so constants a port does not define are left out.
"""

from typing import Optional


KERNEL_CONSTANTS: list[tuple[str, str]] = [
    ("uint16_t", "configMINIMAL_STACK_SIZE"),
    ("uint16_t", "configTIMER_TASK_STACK_DEPTH"),

    ("BaseType_t", "pdFALSE"),
    ("BaseType_t", "pdFAIL"),
    ("BaseType_t", "pdTRUE"),
    ("BaseType_t", "pdPASS"),
    ("BaseType_t", "errQUEUE_FULL"),
    ("BaseType_t", "errQUEUE_EMPTY"),
    ("BaseType_t", "errCOULD_NOT_ALLOCATE_REQUIRED_MEMORY"),
    ("BaseType_t", "errQUEUE_BLOCKED"),
    ("BaseType_t", "errQUEUE_YIELD"),

    ("BaseType_t", "tmrCOMMAND_DELETE"),
    ("BaseType_t", "tmrCOMMAND_START"),
    ("BaseType_t", "tmrCOMMAND_START_FROM_ISR"),
    ("BaseType_t", "tmrCOMMAND_STOP"),
    ("BaseType_t", "tmrCOMMAND_STOP_FROM_ISR"),
    ("BaseType_t", "tmrCOMMAND_RESET"),
    ("BaseType_t", "tmrCOMMAND_RESET_FROM_ISR"),
    ("BaseType_t", "tmrCOMMAND_CHANGE_PERIOD"),
    ("BaseType_t", "tmrCOMMAND_CHANGE_PERIOD_FROM_ISR"),

    ("BaseType_t", "queueSEND_TO_BACK"),
    ("BaseType_t", "queueSEND_TO_FRONT"),
    ("BaseType_t", "queueOVERWRITE"),

    ("uint8_t", "queueQUEUE_TYPE_BASE"),
    ("uint8_t", "queueQUEUE_TYPE_BINARY_SEMAPHORE"),
    ("uint8_t", "queueQUEUE_TYPE_MUTEX"),
    ("uint8_t", "queueQUEUE_TYPE_RECURSIVE_MUTEX"),

    ("UBaseType_t", "semSEMAPHORE_QUEUE_ITEM_LENGTH"),
    ("TickType_t", "semGIVE_BLOCK_TIME"),

    ("TickType_t", "portMAX_DELAY"),
    ("TickType_t", "portTICK_PERIOD_MS"),

    ("BaseType_t", "taskSCHEDULER_SUSPENDED"),
    ("BaseType_t", "taskSCHEDULER_NOT_STARTED"),
    ("BaseType_t", "taskSCHEDULER_RUNNING"),
]


def write_constants_header(constants: Optional[list[tuple[str, str]]] = None) -> str:
    """
    Generate the constants shim header.

    Args:
        constants: (C type, macro name) pairs; defaults to KERNEL_CONSTANTS

    Returns:
        Header text, ending with a newline
    """
    if constants is None:
        constants = KERNEL_CONSTANTS

    lines = []
    for c_type, name in constants:
        undef_name = f"__{name}_UNDEF__"
        lines.append(f"#ifdef {name}")
        lines.append(f"static const {c_type} {undef_name} = {name};")
        lines.append(f"#undef {name}")
        lines.append(f"const {c_type} {name} = {undef_name};")
        lines.append("#endif")

    return "\n".join(lines) + "\n"
