# everythingnet

everythingnet is a small discovery mesh. Each node broadcasts a list of the
nodes it knows over UDP. Every node that hears such a list adds the nodes it
did not know yet. Over time every machine on the network learns the name,
UUID, operating system, CPU, GPU, memory size and capabilities of every other
machine.

## Installing

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Running a node

```
everythingnet
```

On start the node gathers details of the local Linux machine:

- The node name is the host name.
- The UUID is read from `etc/machine-id`.
- The device name comes from DMI on x86 and from the devicetree model on ARM.
  On PowerPC it comes from `proc/cpuinfo`.
- The CPU name comes from `proc/cpuinfo`, or from the devicetree on ARM.

All of these paths are looked up below `--root`, which defaults to `/`. If
these details cannot be gathered, the node prints a `FATAL:` message and exits
with status 1.

The node always runs headless. It drops the graphics acceleration, hosting and
display capabilities and reports its GPU as `None (headless)`. It then prints a
banner with the machine name, OS, CPU, architecture, memory size, GPU and
capabilities.

The main loop runs at a fixed period. On each pass the node:

1. Reads every broadcast that has arrived. It stops early when it meets a
   packet it sent itself.
2. Prints a `Found new node: ...` line for each node it did not know.
3. On the first pass and every fifteenth pass after that, sends its own node
   list.

If the node list grows too large to fit in one 32 KB packet, the node prints an
error and exits with status 1.

Options:

| Option | Meaning |
| --- | --- |
| `--root PATH` | File system root to inspect (default `/`). |
| `--port N` | UDP port to bind and broadcast on (default 24510). |
| `--interface ADDRESS/NETMASK` | Broadcast to this interface's network broadcast address. Repeatable, up to 8. Without it, packets go to 255.255.255.255. |
| `--multicast` | Also send each packet to the multicast group 239.255.24.51, port 24511. |
| `--count N` | Stop after N loop passes. 0, the default, means no limit. |
| `--interval-ms N` | Loop period in milliseconds (default 500). |

## Using the library

The pieces can also be used on their own:

- `everythingnet.printf` provides `sprintf`, `snprintf`, `fctprintf` and
  `printf`. These follow the behaviour of a small embedded printf, including
  `%b` binary output and its rounding rules for `%f`, `%e` and `%g`.
  `everythingnet.numfmt` holds the underlying `FormatSpec`, `format_integer`,
  `format_fixed` and `format_exponent`.
- `everythingnet.cap` provides the `Capability` flags and `cap_to_str`.
- `everythingnet.platinfo` provides `PlatformInfo` and `platform_info`. The
  `platform_info` function returns fixed descriptions of the `dos`, `gcn`,
  `wii` and `windows` platforms.
- `everythingnet.cpuinfo` and `everythingnet.device` parse `/proc/cpuinfo`,
  DMI, devicetree and machine-id contents. `gather_info` combines them.
- `everythingnet.node` provides `NodeEntry` and `NodeList`. These handle the
  big-endian wire format of the node list, merge received lists and check the
  list's size against a packet limit (`NodeListTooLarge`).
- `everythingnet.net` provides `BroadcastMessage` and `NetCore`. `NetCore`
  drives discovery over any object that has the `Transport` methods
  `receive()` and `send(data)`.
- `everythingnet.udp` provides `UdpTransport`, a context manager, together
  with the `broadcast_address`, `prefix_length` and `validate_packet` helpers.
- `everythingnet.timer` provides `LoopTimer`. `everythingnet.state` provides
  `AppState`, which runs the registered exit callbacks.

Here is an example that formats two values:

```python
from everythingnet.printf import sprintf
from everythingnet.cap import Capability, cap_to_str

print(sprintf("%08.3f|%#x", 3.14159, 255))
print(cap_to_str(Capability.SND | Capability.INPUT))
```

## What it does not do

- It has no graphics, sound or input support. Nodes always run headless.
- Gathering details of the local machine works only for Linux. The other
  platforms exist only as the fixed descriptions in `platform_info`.
- It does not list network interfaces by itself. Broadcast addresses come from
  `--interface`, or the limited broadcast address is used.
- Multicast is send-only. The node never joins the group, so it receives
  nothing over multicast.
- The CRC field of a message is always sent as 0 and is never checked.
- Nodes are only ever added. Nothing removes a node that has gone away.
- Apart from `--count`, there is no way to ask a running node to stop.