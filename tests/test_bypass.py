import pytest

from prf.bypass import BypassNetwork
from prf.config import RegFileConfig
from prf.model import Write

from simutil import IDLE, run, set_writes

def network():
    # Write ports 0 and 2 are bypass-eligible, port 1 is not.
    return BypassNetwork(RegFileConfig(
        num_registers = 4,
        num_read_ports = 2,
        num_write_ports = 3,
        register_width = 8,
        bypassable = [True, False, True],
    ))

def apply(ctx, bn, addrs, raws, writes):
    for (sig, addr) in zip(bn.addr, addrs):
        ctx.set(sig, addr)
    for (sig, raw) in zip(bn.raw, raws):
        ctx.set(sig, raw)
    set_writes(ctx, bn.write, writes)
    return (
        [ctx.get(s) for s in bn.data],
        [ctx.get(s) for s in bn.hit],
        [ctx.get(s) for s in bn.conflict],
    )

def test_requires_a_bypass_port():
    config = RegFileConfig(
        num_registers = 4,
        num_read_ports = 1,
        num_write_ports = 2,
        register_width = 8,
        bypassable = [False, False],
    )
    with pytest.raises(AssertionError):
        BypassNetwork(config)

def test_no_candidate_passes_raw_data():
    bn = network()

    async def bench(ctx):
        data, hit, conflict = apply(ctx, bn, [1, 2], [0x11, 0x22],
                                    [Write(3, 0x99), IDLE, Write(3, 0x98)])
        assert data == [0x11, 0x22]
        assert hit == [0, 0]
        assert conflict == [0, 0]

    run(bn, bench, clocked = False)

def test_single_candidate_forwards():
    bn = network()

    async def bench(ctx):
        data, hit, conflict = apply(ctx, bn, [3, 2], [0x11, 0x22],
                                    [IDLE, IDLE, Write(3, 0x5A)])
        assert data == [0x5A, 0x22]
        assert hit == [1, 0]
        assert conflict == [0, 0]

    run(bn, bench, clocked = False)

def test_ineligible_port_is_ignored():
    bn = network()

    async def bench(ctx):
        data, hit, _ = apply(ctx, bn, [1, 1], [0x11, 0x11],
                             [IDLE, Write(1, 0x77), IDLE])
        assert data == [0x11, 0x11]
        assert hit == [0, 0]

    run(bn, bench, clocked = False)

def test_invalid_write_is_ignored():
    bn = network()

    async def bench(ctx):
        data, hit, _ = apply(ctx, bn, [1, 2], [0x11, 0x22],
                             [Write(1, 0x77, False), IDLE, Write(2, 0x66, False)])
        assert data == [0x11, 0x22]
        assert hit == [0, 0]

    run(bn, bench, clocked = False)

def test_register_zero_is_never_forwarded():
    bn = network()

    async def bench(ctx):
        data, hit, conflict = apply(ctx, bn, [0, 0], [0, 0],
                                    [Write(0, 0x77), IDLE, Write(0, 0x66)])
        assert data == [0, 0]
        assert hit == [0, 0]
        assert conflict == [0, 0]

    run(bn, bench, clocked = False)

def test_multiple_candidates_lowest_port_wins():
    bn = network()

    async def bench(ctx):
        data, hit, conflict = apply(ctx, bn, [3, 2], [0x11, 0x22],
                                    [Write(3, 0xAA), IDLE, Write(3, 0xCC)])
        assert data == [0xAA, 0x22]
        assert hit == [1, 0]
        assert conflict == [1, 0]

        # Same inputs, same answer.
        data, _, conflict = apply(ctx, bn, [3, 3], [0x11, 0x22],
                                  [Write(3, 0xAA), IDLE, Write(3, 0xCC)])
        assert data == [0xAA, 0xAA]
        assert conflict == [1, 1]

    run(bn, bench, clocked = False)

def test_read_ports_resolve_independently():
    bn = network()

    async def bench(ctx):
        data, hit, _ = apply(ctx, bn, [2, 3], [0x11, 0x22],
                             [Write(3, 0xAA), IDLE, Write(2, 0xCC)])
        assert data == [0xCC, 0xAA]
        assert hit == [1, 1]

    run(bn, bench, clocked = False)
