# Port contracts between the register file and its neighbors.

from amaranth import *
from amaranth.lib.wiring import *

from prf import StreamSig

# Read request/response pair, seen from the requester. There's no handshake:
# the register file performs every read every cycle.
def ReadPort(addr_bits, data_bits):
    return Signature({
        'addr': Out(addr_bits),
        'data': In(data_bits),
    })

def RegWrite(addr_bits, data_bits):
    return Signature({
        'addr': Out(addr_bits),
        'data': Out(data_bits),
    })

# Write request stream, seen from the writer. Register files hold 'ready' high
# at all times.
def WritePort(addr_bits, data_bits):
    return StreamSig(RegWrite(addr_bits, data_bits))

# Result stream produced by an execution unit. 'pdst' is the physical
# destination register picked by rename.
def ExeResp(addr_bits, data_bits):
    return StreamSig(Signature({
        'pdst': Out(addr_bits),
        'data': Out(data_bits),
    }))

def exe_write_port(m, resp):
    """Reshapes an execution unit result stream into a register file write
    port.

    Returns a new WritePort interface driven from 'resp'; connect it to one of
    the register file's write ports. The write port's ready is routed back to
    resp.ready, so the execution unit sees the register file's unconditional
    acceptance. Nothing is registered.
    """
    addr_bits = resp.payload.pdst.shape().width
    data_bits = resp.payload.data.shape().width
    port = WritePort(addr_bits, data_bits).create()
    m.d.comb += [
        port.payload.addr.eq(resp.payload.pdst),
        port.payload.data.eq(resp.payload.data),
        port.valid.eq(resp.valid),

        resp.ready.eq(port.ready),
    ]
    return port
