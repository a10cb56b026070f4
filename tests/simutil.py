# Shared testbench plumbing.

from amaranth.sim import Simulator

from prf.model import Write

IDLE = Write(0, 0, False)

def run(dut, bench, clocked = True):
    sim = Simulator(dut)
    if clocked:
        sim.add_clock(1e-6)
    sim.add_testbench(bench)
    sim.run()

def set_reads(ctx, ports, addrs):
    for (port, addr) in zip(ports, addrs):
        ctx.set(port.addr, addr)

def set_writes(ctx, ports, writes):
    for (port, w) in zip(ports, writes):
        ctx.set(port.payload.addr, w.addr)
        ctx.set(port.payload.data, w.data)
        ctx.set(port.valid, int(w.valid))

def get_reads(ctx, ports):
    return [ctx.get(port.data) for port in ports]

async def cycle(ctx, rf, reads, writes):
    """Applies one cycle of inputs, samples the read ports, then lets the
    clock edge happen. Returns what the read ports showed."""
    set_reads(ctx, rf.read, reads)
    set_writes(ctx, rf.write, writes)
    seen = get_reads(ctx, rf.read)
    await ctx.tick()
    return seen

async def peek(ctx, rf, addr, latency):
    """Reads 'addr' on every read port with no writes going on, waiting out
    the read latency. Returns read port 0's data."""
    reads = [addr] * len(rf.read)
    idle = [IDLE] * len(rf.write)
    seen = await cycle(ctx, rf, reads, idle)
    for _ in range(latency):
        seen = await cycle(ctx, rf, reads, idle)
    return seen[0]
