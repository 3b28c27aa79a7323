"""
FreeRTOS Side Tables
====================

Fixed, inspectable lookup tables the code generator consults when it
emits a typed function, plus the name filters deciding which macros are
attempted at all.

- variable_type(): parameter type by (macro name, parameter name)
- return_type(): return type by macro name
- IDENTIFIER_RENAMES: names with a different spelling in the bindings
- C_TYPE_NAMES: primitive C type names as seen through ::core::ffi
- should_skip(): the macro name denylist

The kernel's parameter naming convention (x = BaseType_t or handle,
ux = UBaseType_t, pv = void pointer, px = pointer to structure, ul = u32)
makes a name-keyed table sufficient for the macros the kernel publishes.
"""

from fnmatch import fnmatchcase
from typing import Iterable, Optional


# =============================================================================
# Parameter Types
# =============================================================================

PARAMETER_TYPES: dict[str, str] = {
    "pxHigherPriorityTaskWoken": "*mut BaseType_t",
    "pxYieldPending": "*mut BaseType_t",
    "pxPreviousWakeTime": "*mut UBaseType_t",
    "uxQueueLength": "UBaseType_t",
    "uxItemSize": "UBaseType_t",
    "uxMaxCount": "UBaseType_t",
    "uxInitialCount": "UBaseType_t",
    "uxTopPriority": "UBaseType_t",
    "uxPriority": "UBaseType_t",
    "uxReadyPriorities": "UBaseType_t",
    "uxIndexToNotify": "UBaseType_t",
    "uxIndexToWaitOn": "UBaseType_t",
    "uxIndexToClear": "UBaseType_t",
    "pvItemToQueue": "*const ::core::ffi::c_void",
    "pvParameters": "*const ::core::ffi::c_void",
    "pvBlockToFree": "*mut ::core::ffi::c_void",
    "pcName": "*const ::core::ffi::c_char",
    "xMutex": "QueueHandle_t",
    "xQueue": "QueueHandle_t",
    "xSemaphore": "SemaphoreHandle_t",
    "xBlockTime": "TickType_t",
    "xTicksToWait": "TickType_t",
    "xNewPeriod": "TickType_t",
    "xExpectedIdleTime": "TickType_t",
    "xTimeIncrement": "TickType_t",
    "xTask": "TaskHandle_t",
    "xTaskToNotify": "TaskHandle_t",
    "pxCreatedTask": "*mut TaskHandle_t",
    "pvTaskCode": "TaskFunction_t",
    "xTimer": "TimerHandle_t",
    "eAction": "eNotifyAction",
    "ulValue": "u32",
    "ulSecureStackSize": "u32",
    "ulBitsToClearOnEntry": "u32",
    "ulBitsToClearOnExit": "u32",
    "ulBitsToClear": "u32",
    "usStackDepth": "u16",
    "pulPreviousNotificationValue": "*mut u32",
    "pulPreviousNotifyValue": "*mut u32",
    "pulNotificationValue": "*mut u32",
    "pvTaskToDelete": "*mut ::core::ffi::c_void",
    "pvBuffer": "*mut ::core::ffi::c_void",
    "pucQueueStorage": "*mut u8",
    "pxQueueBuffer": "*mut StaticQueue_t",
    "pxSemaphoreBuffer": "*mut StaticSemaphore_t",
    "pxMutexBuffer": "*mut StaticSemaphore_t",
    "pxStaticSemaphore": "*mut StaticSemaphore_t",
    "xClearCountOnExit": "BaseType_t",
}

# Types of a parameter named plain 'x', by macro name suffix (or exact name)
X_PARAMETER_TYPES: list[tuple[str, str]] = [
    ("*_CRITICAL_FROM_ISR", "UBaseType_t"),
    ("*CLEAR_INTERRUPT_MASK_FROM_ISR", "UBaseType_t"),
    ("*YIELD_FROM_ISR", "BaseType_t"),
    ("xTaskCreateRestricted", "TaskParameters_t"),
]


def variable_type(macro_name: str, parameter: str) -> Optional[str]:
    """
    Return the binding type of a macro parameter, or None if unknown.

    Example:
        >>> variable_type("xQueueSend", "xTicksToWait")
        'TickType_t'
    """
    if parameter in PARAMETER_TYPES:
        return PARAMETER_TYPES[parameter]

    if parameter == "x":
        for pattern, type_name in X_PARAMETER_TYPES:
            if fnmatchcase(macro_name, pattern):
                return type_name

    return None


# =============================================================================
# Return Types
# =============================================================================

def return_type(macro_name: str) -> Optional[str]:
    """
    Return the binding return type of a macro, or None if it returns nothing
    known.

    Rules are checked in order; the first match wins.
    """
    if "GetMutexHolder" in macro_name:
        return "TaskHandle_t"

    if macro_name.startswith("port") and macro_name.endswith("_PRIORITY"):
        return "UBaseType_t"

    if macro_name.startswith("xSemaphoreCreate"):
        return "SemaphoreHandle_t"

    if macro_name.startswith("xQueueCreate"):
        return "QueueHandle_t"

    if macro_name.startswith("ul"):
        return "u32"

    if macro_name.startswith("x"):
        return "BaseType_t"

    if macro_name.startswith("ux"):
        return "UBaseType_t"

    return None


# =============================================================================
# Renames
# =============================================================================

# Identifiers whose generated-binding spelling differs from the C spelling.
# The binding generator prefixes enum variants with their enum name.
IDENTIFIER_RENAMES: dict[str, str] = {
    "NULL": "::core::ptr::null_mut()",
    "eIncrement": "eNotifyAction_eIncrement",
}

# Primitive C type names in type position
C_TYPE_NAMES: dict[str, str] = {
    "void": "::core::ffi::c_void",
    "char": "::core::ffi::c_char",
    "short": "::core::ffi::c_short",
    "int": "::core::ffi::c_int",
    "long": "::core::ffi::c_long",
    "float": "::core::ffi::c_float",
    "double": "::core::ffi::c_double",
    "int8_t": "i8",
    "int16_t": "i16",
    "int32_t": "i32",
    "int64_t": "i64",
    "uint8_t": "u8",
    "uint16_t": "u16",
    "uint32_t": "u32",
    "uint64_t": "u64",
    "size_t": "usize",
}


# =============================================================================
# Denylist
# =============================================================================

SKIP_PREFIXES = (
    "_",
    "INT",
    "UINT",
    "list",
    "trace",
    "config",
    "configAssert",
    "portTASK_FUNCTION",
)

SKIP_NAMES = frozenset({
    "offsetof",
    "taskYIELD",
    "portYIELD",
    "vSemaphoreCreateBinary",
})

SKIP_SUFFIXES = (
    "YIELD_FROM_ISR",
    "_CRITICAL_FROM_ISR",
    "DISABLE_INTERRUPTS",
    "ENABLE_INTERRUPTS",
    "END_SWITCHING_ISR",
    "INTERRUPT_MASK_FROM_ISR",
    "_TCB",
)


def should_skip(name: str, extra_patterns: Iterable[str] = ()) -> bool:
    """
    Return True if a macro must not be translated.

    These macros either expand to port-specific code the transpiler cannot
    model, duplicate functions the bindings already export, or are
    configuration and tracing hooks.

    Args:
        name: Macro name
        extra_patterns: Additional shell-style name patterns to skip
    """
    if name in SKIP_NAMES:
        return True
    if name.startswith(SKIP_PREFIXES) or name.endswith(SKIP_SUFFIXES):
        return True
    return any(fnmatchcase(name, pattern) for pattern in extra_patterns)
