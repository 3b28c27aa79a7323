# =============================================================================
# test_constants.py - Constants Shim Header Tests
# =============================================================================

from rtos_bindgen.constants import KERNEL_CONSTANTS, write_constants_header


class TestConstantsHeader:
    """Test the generated shim header."""

    def test_block_format(self):
        header = write_constants_header([("TickType_t", "portMAX_DELAY")])
        assert header == (
            "#ifdef portMAX_DELAY\n"
            "static const TickType_t __portMAX_DELAY_UNDEF__ = portMAX_DELAY;\n"
            "#undef portMAX_DELAY\n"
            "const TickType_t portMAX_DELAY = __portMAX_DELAY_UNDEF__;\n"
            "#endif\n"
        )

    def test_default_table(self):
        header = write_constants_header()
        assert header.count("#ifdef ") == len(KERNEL_CONSTANTS)
        assert "const BaseType_t queueSEND_TO_BACK = __queueSEND_TO_BACK_UNDEF__;" in header
        assert header.endswith("#endif\n")

    def test_table_order_kept(self):
        header = write_constants_header([("uint8_t", "B"), ("uint8_t", "A")])
        assert header.index("#ifdef B") < header.index("#ifdef A")

    def test_kernel_names_unique(self):
        names = [name for _, name in KERNEL_CONSTANTS]
        assert len(names) == len(set(names))

