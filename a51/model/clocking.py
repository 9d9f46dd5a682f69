# a51/model/clocking.py
# majority (stop/go) clock control for the three A5/1 registers
#
# - each register contributes one clock-control bit (its "mid" bit)
# - the majority of the three mid bits is computed on a single snapshot
# - a register is clocked iff its own mid bit equals the majority
#   -> at least two registers move every cycle, on average 3 out of 4
# - during key/frame loading all three are clocked regardless (clock_all_three)

from typing import NamedTuple, Tuple

from a51.model.registers import R1, R2, R3


class CipherState(NamedTuple):
    r1: int = 0
    r2: int = 0
    r3: int = 0


def majority(r1: int, r2: int, r3: int) -> int:
    if R1.mid(r1) + R2.mid(r2) + R3.mid(r3) >= 2:
        return 1
    return 0


def clock_flags(state: CipherState) -> Tuple[bool, bool, bool]:
    # which registers move on the next majority clock
    maj = majority(*state)
    return (R1.mid(state.r1) == maj,
            R2.mid(state.r2) == maj,
            R3.mid(state.r3) == maj)


def clock(state: CipherState) -> CipherState:
    c1, c2, c3 = clock_flags(state)
    r1, r2, r3 = state
    if c1:
        r1 = R1.clock(r1)
    if c2:
        r2 = R2.clock(r2)
    if c3:
        r3 = R3.clock(r3)
    return CipherState(r1, r2, r3)


def clock_all_three(state: CipherState) -> CipherState:
    return CipherState(R1.clock(state.r1), R2.clock(state.r2), R3.clock(state.r3))


def output_bit(state: CipherState) -> int:
    # one bit from the top of each register, xored together
    return R1.out(state.r1) ^ R2.out(state.r2) ^ R3.out(state.r3)


if __name__ == "__main__":
    # exhaustive majority table over the three mid bits
    for b1 in (0, 1):
        for b2 in (0, 1):
            for b3 in (0, 1):
                s = CipherState(b1 * R1.mid_mask, b2 * R2.mid_mask, b3 * R3.mid_mask)
                maj = majority(*s)
                assert maj == (1 if b1 + b2 + b3 >= 2 else 0)
                flags = clock_flags(s)
                assert sum(flags) >= 2
                print(f"mid=({b1},{b2},{b3}) -> maj={maj} clocked={flags}")
    print("clocking.py: self-test OK")
