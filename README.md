# raytracer

Building blocks for a ray tracer whose work can be shared between a server
and a pool of client machines: vector maths, the binary packet protocol the
machines speak, framed TCP transport, server-side sessions and packet
dispatch, command-line parsing and signal handling.

## Modules

- `raytracer.vec` – `Vec`, an immutable N-dimensional vector of floats with
  element-wise and scalar arithmetic, `length`, `normalized`, `clamped`,
  `Vec.zeros`, `Vec.random`, `Vec.random_unit`; and the functions `dot`,
  `cross`, `reflect` and `random_double`. `Color` is another name for `Vec`.
- `raytracer.codec` – `Serializer` and `Deserializer` for big-endian
  integers, doubles, booleans, length-prefixed UTF-8 strings and vectors.
- `raytracer.packets` – `PacketType` and the packets `Ping`, `Pong`, `Kiss`,
  `Workslave`, `Cestciao`, `Finito`, `Nvmstop`.
- `raytracer.tile` – `Tile`, a rectangle of the image to render.
- `raytracer.framing` – `encode_frames`, `FrameDecoder` and `PacketSocket`.
- `raytracer.channel` – `Channel`, a thread-safe FIFO.
- `raytracer.client` – `Client`, the client end of a cluster connection.
- `raytracer.session` – `Session` and `SessionManager` on the server side.
- `raytracer.server_handlers` – `ServerPacketDispatcher` with handlers for
  `Pong` and `Cestciao` packets.
- `raytracer.cli` – `CommandLine`, `Attributes`, `Mode`, `InvalidUsage`.
- `raytracer.signals` – `SignalManager`.

## Vectors

```python
from raytracer.vec import Vec, cross, dot, reflect

a = Vec(1.0, 0.0, 0.0)
b = Vec(0.0, 1.0, 0.0)

dot(a, b)              # 0.0
cross(a, b)            # Vec(0.0, 0.0, 1.0)
(a + b).normalized()   # unit vector halfway between a and b
a * 2                  # Vec(2.0, 0.0, 0.0)
reflect(Vec(1.0, -1.0, 0.0), b)  # Vec(1.0, 1.0, 0.0)
```

Vectors of different dimensions cannot be combined (`ValueError`). A scalar
on the left of an operator behaves as if it were on the right, so `2 - v`
equals `v - 2`. Normalising a zero vector returns the zero vector.

## Binary encoding

```python
from raytracer.codec import Deserializer, Serializer

out = Serializer()
out.write_u32(42)
out.write_string("scene")
raw = out.data()

src = Deserializer(raw)
src.read_u32()      # 42
src.read_string()   # "scene"
src.has_remaining() # False
```

Writing an integer that does not fit its width raises `ValueOverflow`, as
does reading a boolean byte other than 0 or 1. Reading past the end of the
buffer raises `InvalidPacketSize`.

## Packets

Every packet serialises to bytes whose first byte is its type; any of them
can be rebuilt from those bytes.

```python
from raytracer.packets import Packet, PacketType, Ping, Workslave, packet_type_name

raw = Ping(1_700_000_000_000).serialize()
Packet.from_bytes(raw)            # Ping(timestamp=1700000000000)

job = Workslave("camera: ...", x=0, y=0, width=64, height=64)
Packet.from_bytes(job.serialize()) == job   # True

packet_type_name(PacketType.PING)  # "PING"
```

`Pong` carries a `progress` field that is kept locally but not sent.
`Finito` carries a list of three-component colour vectors. Empty input, an
unknown type byte or bytes left over after a packet's fields raise
`EmptyByteBuffer`, `UnknownPacket` or `UnexpectedRemainingData`.

## Framing

On the wire a packet is sent as chunks of at most 32768 bytes, each preceded
by a two-byte big-endian length, and terminated by a zero-length header.

```python
from raytracer.framing import FrameDecoder, encode_frames

wire = encode_frames(raw)
decoder = FrameDecoder()
decoder.feed(wire[:3])   # []
decoder.feed(wire[3:])   # [raw]
```

`PacketSocket` applies this framing to a TCP socket: `PacketSocket.listen`
and `accept` on the server side, `PacketSocket.connect` on the client side,
then `send_packet` and `receive_packet`. Send failures are logged rather
than raised; `receive_packet` raises `ClientDisconnected` when the peer
hangs up and returns empty bytes once the socket is closed.

## Client

```python
import threading

from raytracer.client import Client
from raytracer.packets import Cestciao

with Client("127.0.0.1", 4242) as client:
    errors = []
    worker = threading.Thread(target=client.run, args=(errors.append,))
    worker.start()
    client.push_packet(Cestciao())
    ...
    packet = client.pop_packet()   # None if nothing has arrived
    client.stop()
    worker.join()
```

`run` sends queued packets and collects incoming ones until `stop` is
called; any error ends the loop and is passed to the callback.

## Server sessions and dispatch

`SessionManager` keeps one `Session` per client socket: `create_session`,
`get_session`, `has_session`, `close_session`, `sessions` and
`close_all_sessions` (which sends each client a `Kiss` first).
`Session.refresh_latency` sends a `Ping` stamped with `current_timestamp()`
in milliseconds.

`ServerPacketDispatcher.dispatch(packet, session)` runs the handler for the
packet's type and returns `False` when there is none. A `Pong` sets the
session's `latency` from the echoed timestamp (a timestamp from the future
raises `ClockSkew`); a `Cestciao` marks the session `SessionState.DEADASS`.
Further handlers can be added with `register`.

## Command line

```python
from raytracer.cli import CommandLine, Mode

command_line = CommandLine()
command_line.parse(["--mode", "server", "-p", "4242",
                    "--config", "server.yml", "scene.yml"])   # False
command_line.attributes.program_mode   # Mode.SERVER
command_line.attributes.port           # 4242
```

`parse` returns `True` when a lone `--help`/`-h` or `--about`/`-a` was given
and its text printed, meaning the program should exit. Aliases are
`-m` for `--mode`; `-c`, `-t` and `--cores` for `--threads`; `-v`,
`--verbose` and `--debug` for `-d`. `-h localhost` becomes `127.0.0.1`.
Malformed values and invalid combinations – a client without a host, a
server without a configuration file, a port in self mode and so on – raise
`InvalidUsage`.

## Signals

```python
from raytracer.signals import SignalManager

SignalManager(app).install()
```

SIGINT and SIGTERM call `app.stop()`; SIGPIPE, where the platform has it, is
caught and ignored. `install` must be called from the main thread.

## What the package does not do

It does not render anything: there are no scenes, cameras, shapes, lights,
materials or image files, and no matrix, point or ray types. It has no
server loop that splits an image into tiles and hands them out to clients,
no client that renders a `Workslave` job, and no command to start a
program; the pieces above are for an application to assemble.