# a51/model/registers.py
# the three A5/1 linear feedback shift registers
#
# R1: 19 bits, taps 18,17,16,13, clock-control bit 8,  output bit 18
# R2: 22 bits, taps 21,20,       clock-control bit 10, output bit 21
# R3: 23 bits, taps 22,21,20,7,  clock-control bit 10, output bit 22
#
# conventions:
# - bit 0 is the LSB of the register value, the output bit is always the MSB
# - one clock step: feedback = parity(value & taps), shift left by one,
#   drop the bit that leaves the register, insert feedback at bit 0
#
# the masks below are derived from the bit indices and must equal
#   R1: mask 0x07FFFF taps 0x072000 mid 0x000100 out 0x040000
#   R2: mask 0x3FFFFF taps 0x300000 mid 0x000400 out 0x200000
#   R3: mask 0x7FFFFF taps 0x700080 mid 0x000400 out 0x400000

from dataclasses import dataclass
from typing import Tuple

from a51.model.helpers import parity


def clock_register(value: int, mask: int, taps: int) -> int:
    t = value & taps
    value = (value << 1) & mask
    value |= parity(t)
    return value


@dataclass(frozen=True)
class Register:
    name: str
    width: int
    taps: Tuple[int, ...]
    mid_bit: int

    @property
    def mask(self) -> int:
        return (1 << self.width) - 1

    @property
    def tap_mask(self) -> int:
        m = 0
        for t in self.taps:
            m |= 1 << t
        return m

    @property
    def mid_mask(self) -> int:
        return 1 << self.mid_bit

    @property
    def out_mask(self) -> int:
        return 1 << (self.width - 1)

    def clock(self, value: int) -> int:
        return clock_register(value, self.mask, self.tap_mask)

    def mid(self, value: int) -> int:
        return parity(value & self.mid_mask)

    def out(self, value: int) -> int:
        return parity(value & self.out_mask)


R1 = Register("R1", 19, (18, 17, 16, 13), 8)
R2 = Register("R2", 22, (21, 20), 10)
R3 = Register("R3", 23, (22, 21, 20, 7), 10)

REGISTERS = (R1, R2, R3)


if __name__ == "__main__":
    expected = {
        "R1": (0x07FFFF, 0x072000, 0x000100, 0x040000),
        "R2": (0x3FFFFF, 0x300000, 0x000400, 0x200000),
        "R3": (0x7FFFFF, 0x700080, 0x000400, 0x400000),
    }
    for reg in REGISTERS:
        got = (reg.mask, reg.tap_mask, reg.mid_mask, reg.out_mask)
        assert got == expected[reg.name], f"{reg.name}: {[hex(v) for v in got]}"
        print(f"[{reg.name}] width={reg.width} mask={reg.mask:06X} taps={reg.tap_mask:06X} "
              f"mid={reg.mid_mask:06X} out={reg.out_mask:06X}")
    print("registers.py: self-test OK")
