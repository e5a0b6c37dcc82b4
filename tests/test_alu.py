"""Tests for ALU operations (8xxx)."""

import pytest
from chix8 import DecodeError, Quirks, create_state, execute


class TestBasicALU:
    """Test basic ALU operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x42))
        state = state.replace(V=state.V.at[2].set(0x99))

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99

    def test_alu_set_leaves_vf(self, fresh_state):
        """8XY0 - VF is not a side effect of a register copy."""
        state = fresh_state.replace(V=fresh_state.V.at[15].set(0x07))
        state = execute(state, 0x8120)
        assert state.V[15] == 0x07

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xF0))
        state = state.replace(V=state.V.at[2].set(0x0F))

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF
        assert state.V[15] == 0

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xF0))
        state = state.replace(V=state.V.at[2].set(0xF1))

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xFF))
        state = state.replace(V=state.V.at[2].set(0xF0))

        state = execute(state, 0x8123)  # V1 ^= V2

        assert state.V[1] == 0x0F


class TestLogicVFReset:
    """Test the vf_reset quirk on 8XY1/8XY2/8XY3."""

    @pytest.mark.parametrize("instruction", [0x8121, 0x8122, 0x8123])
    def test_modern_keeps_vf(self, modern_state, instruction):
        state = modern_state.replace(V=modern_state.V.at[15].set(0x01))
        state = execute(state, instruction)
        assert state.V[15] == 0x01

    @pytest.mark.parametrize("instruction", [0x8121, 0x8122, 0x8123])
    def test_cosmac_resets_vf(self, cosmac_state, instruction):
        state = cosmac_state.replace(V=cosmac_state.V.at[15].set(0x01))
        state = execute(state, instruction)
        assert state.V[15] == 0x00


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - Add without carry."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x10))
        state = state.replace(V=state.V.at[2].set(0x20))

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x30
        assert state.V[15] == 0

    def test_alu_add_with_carry(self, fresh_state):
        """8XY4 - Add with carry."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xFF))
        state = state.replace(V=state.V.at[2].set(0x01))

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x00  # 256 wraps to 0
        assert state.V[15] == 1  # Carry set

    def test_alu_sub_xy_no_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, no borrow."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x30))
        state = state.replace(V=state.V.at[2].set(0x10))

        state = execute(state, 0x8125)  # V1 -= V2

        assert state.V[1] == 0x20
        assert state.V[15] == 1  # No borrow (VX >= VY)

    def test_alu_sub_xy_with_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, with borrow."""
        state = fresh_state
        state = state.replace(V=state.V.at[3].set(0x10))
        state = state.replace(V=state.V.at[4].set(0x30))

        state = execute(state, 0x8345)  # V3 -= V4

        assert state.V[3] == 0xE0  # 16 - 48 = -32 → 224
        assert state.V[15] == 0  # Borrow (VX < VY)

    def test_alu_sub_equal_values(self, fresh_state):
        """8XY5 - Equal operands give zero and no borrow."""
        state = fresh_state
        state = state.replace(V=state.V.at[3].set(0x42))
        state = state.replace(V=state.V.at[4].set(0x42))

        state = execute(state, 0x8345)

        assert state.V[3] == 0x00
        assert state.V[15] == 1

    def test_alu_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, no borrow."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x10))
        state = state.replace(V=state.V.at[2].set(0x30))

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20  # 48 - 16 = 32
        assert state.V[15] == 1  # No borrow (VY >= VX)

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, with borrow."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x30))
        state = state.replace(V=state.V.at[2].set(0x10))

        state = execute(state, 0x8127)

        assert state.V[1] == 0xE0
        assert state.V[15] == 0


class TestALUShifts:
    """Test shift operations with quirk differences."""

    def test_shift_right_modern_even(self, modern_state):
        """8XY6 - Shift right, modern quirks, even number."""
        state = modern_state.replace(V=modern_state.V.at[1].set(0x04))
        state = state.replace(V=state.V.at[2].set(0xFF))  # Should be ignored

        state = execute(state, 0x8126)  # V1 >>= 1

        assert state.V[1] == 0x02  # 4 >> 1 = 2
        assert state.V[15] == 0  # LSB was 0

    def test_shift_right_modern_odd(self, modern_state):
        """8XY6 - Shift right, modern quirks, odd number."""
        state = modern_state.replace(V=modern_state.V.at[3].set(0x05))
        state = state.replace(V=state.V.at[4].set(0xFF))  # Should be ignored

        state = execute(state, 0x8346)  # V3 >>= 1

        assert state.V[3] == 0x02  # 5 >> 1 = 2
        assert state.V[15] == 1  # LSB was 1

    def test_shift_right_cosmac(self, cosmac_state):
        """8XY6 - Shift right, COSMAC quirks."""
        state = cosmac_state.replace(V=cosmac_state.V.at[5].set(0x08))  # Should be ignored
        state = state.replace(V=state.V.at[6].set(0x03))  # 00000011

        state = execute(state, 0x8566)  # V5 = V6 >> 1

        assert state.V[5] == 0x01  # V6 (3) >> 1 = 1
        assert state.V[15] == 1  # LSB of V6 was 1

    def test_shift_left_modern_overflow(self, modern_state):
        """8XYE - Shift left, modern quirks, with overflow."""
        state = modern_state.replace(V=modern_state.V.at[3].set(0x81))  # 10000001
        state = state.replace(V=state.V.at[4].set(0xFF))  # Should be ignored

        state = execute(state, 0x834E)  # V3 <<= 1

        assert state.V[3] == 0x02  # 129 << 1 = 258 → 2
        assert state.V[15] == 1  # MSB was 1

    def test_shift_left_cosmac(self, cosmac_state):
        """8XYE - Shift left, COSMAC quirks shift VY."""
        state = cosmac_state.replace(V=cosmac_state.V.at[3].set(0x81))
        state = state.replace(V=state.V.at[4].set(0x41))

        state = execute(state, 0x834E)  # V3 = V4 << 1

        assert state.V[3] == 0x82
        assert state.V[15] == 0

    def test_shift_quirk_comparison(self):
        """Test that the shift_uses_vy quirk switches the shift source."""
        # Modern: V1 = V1 >> 1 (ignores V2)
        state_modern = create_state(quirks=Quirks(shift_uses_vy=False))
        state_modern = state_modern.replace(V=state_modern.V.at[1].set(0x08))  # V1 = 8
        state_modern = state_modern.replace(V=state_modern.V.at[2].set(0x03))  # V2 = 3
        state_modern = execute(state_modern, 0x8126)

        # COSMAC: V1 = V2 >> 1 (uses V2)
        state_cosmac = create_state(quirks=Quirks(shift_uses_vy=True))
        state_cosmac = state_cosmac.replace(V=state_cosmac.V.at[1].set(0x08))  # V1 = 8
        state_cosmac = state_cosmac.replace(V=state_cosmac.V.at[2].set(0x03))  # V2 = 3
        state_cosmac = execute(state_cosmac, 0x8126)

        assert state_modern.V[1] == 0x04  # 8 >> 1 = 4 (used V1)
        assert state_cosmac.V[1] == 0x01  # 3 >> 1 = 1 (used V2)


class TestFlagOrdering:
    """VF is written after VX, so the flag wins when X is F."""

    def test_add_into_vf_keeps_carry(self, fresh_state):
        state = fresh_state
        state = state.replace(V=state.V.at[15].set(0xFF))
        state = state.replace(V=state.V.at[1].set(0x02))

        state = execute(state, 0x8F14)  # VF += V1, overflows

        assert state.V[15] == 1

    def test_sub_into_vf_keeps_flag(self, fresh_state):
        state = fresh_state
        state = state.replace(V=state.V.at[15].set(0x10))
        state = state.replace(V=state.V.at[1].set(0x01))

        state = execute(state, 0x8F15)  # VF -= V1, no borrow

        assert state.V[15] == 1

    def test_shift_into_vf_keeps_shifted_bit(self, fresh_state):
        state = fresh_state.replace(V=fresh_state.V.at[15].set(0x02))

        state = execute(state, 0x8F06)  # VF >>= 1, LSB was 0

        assert state.V[15] == 0

    def test_operands_read_before_write(self, fresh_state):
        """VF used as the source operand is read before the flag overwrites it."""
        state = fresh_state
        state = state.replace(V=state.V.at[15].set(0x42))  # VF = 0x42
        state = state.replace(V=state.V.at[1].set(0x10))

        state = execute(state, 0x81F4)  # V1 += VF
        assert state.V[1] == 0x52, "Addition with VF as source failed"
        assert state.V[15] == 0, "VF should be overwritten by operation result"


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    @pytest.mark.parametrize("op", [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF])
    def test_alu_undefined_operations(self, fresh_state, op):
        """Undefined 8XYN operations are decode errors."""
        with pytest.raises(DecodeError) as excinfo:
            execute(fresh_state, 0x8120 | op)
        assert excinfo.value.opcode == 0x8120 | op

    def test_alu_self_operations(self, fresh_state):
        """Test operations where VX and VY are the same register."""
        state = fresh_state.replace(V=fresh_state.V.at[5].set(0xAA))

        # V5 ^= V5 (should become 0)
        state = execute(state, 0x8553)
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        # Reset and test self ADD
        state = state.replace(V=state.V.at[5].set(0x80))
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"
