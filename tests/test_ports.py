import pytest
from amaranth import *
from amaranth.lib.wiring import connect

from prf.config import RegFileConfig, Variant
from prf.ports import ExeResp, exe_write_port
from prf.variants import RegisterFile

from simutil import run

# Execution unit result streams feeding a register file through the write
# request adapter.
class ExeToRegFile(Elaboratable):
    def __init__(self, config, variant):
        self.rf = RegisterFile(config, variant)
        self.resps = [
            ExeResp(config.addr_bits, config.register_width).create()
            for _ in range(config.num_write_ports)
        ]

    def elaborate(self, platform):
        m = Module()
        m.submodules.rf = self.rf
        for (resp, wport) in zip(self.resps, self.rf.write):
            connect(m, exe_write_port(m, resp), wport)
        return m

def config():
    return RegFileConfig(
        num_registers = 3,
        num_read_ports = 2,
        num_write_ports = 2,
        register_width = 8,
        bypassable = [True, False],
    )

def send(ctx, resp, pdst, data, valid = 1):
    ctx.set(resp.payload.pdst, pdst)
    ctx.set(resp.payload.data, data)
    ctx.set(resp.valid, valid)

@pytest.mark.parametrize("variant", list(Variant))
def test_results_are_always_accepted(variant):
    dut = ExeToRegFile(config(), variant)

    async def bench(ctx):
        for valid in [0, 1]:
            for resp in dut.resps:
                send(ctx, resp, 1, 0x42, valid)
            assert [ctx.get(resp.ready) for resp in dut.resps] == [1, 1]
            await ctx.tick()

    run(dut, bench)

def test_result_reaches_register_file():
    dut = ExeToRegFile(config(), Variant.COMB)
    rf = dut.rf

    async def bench(ctx):
        ctx.set(rf.read[0].addr, 2)
        ctx.set(rf.read[1].addr, 1)
        send(ctx, dut.resps[0], 2, 0x5A)
        send(ctx, dut.resps[1], 1, 0x33)
        # Port 0 is bypassable, port 1 isn't.
        assert ctx.get(rf.read[0].data) == 0x5A
        assert ctx.get(rf.read[1].data) == 0
        await ctx.tick()

        send(ctx, dut.resps[0], 0, 0, 0)
        send(ctx, dut.resps[1], 0, 0, 0)
        assert ctx.get(rf.read[0].data) == 0x5A
        assert ctx.get(rf.read[1].data) == 0x33

    run(dut, bench)

def test_invalid_result_is_dropped():
    dut = ExeToRegFile(config(), Variant.COMB)
    rf = dut.rf

    async def bench(ctx):
        ctx.set(rf.read[0].addr, 2)
        send(ctx, dut.resps[0], 2, 0x5A, 0)
        assert ctx.get(rf.read[0].data) == 0
        await ctx.tick()
        assert ctx.get(rf.read[0].data) == 0

    run(dut, bench)
