# airhost

Building blocks for an AirPlay mirroring and audio-streaming receiver. The
package parses the receiver's options, decodes "now playing" metadata, maps
volume and timestamps, dumps streams to files and works out what the service
advertises and which clients it admits.

## Modules

- `airhost.options` parses command-line style arguments into an `Options`
  dataclass with `parse_arguments(args, options)`. Invalid options or values
  raise `OptionError`. `read_config_file(path, options)` applies a startup
  file (one option per line, no leading `-`, lines starting with `#` ignored,
  items may be quoted), and `find_config_file()` looks for `$UXPLAYRC`,
  `~/.uxplayrc` and `~/.config/uxplayrc` in that order. Helpers such as
  `parse_display_settings`, `parse_ports`, `validate_mac`, `random_mac`,
  `parse_hw_addr` and `help_text` are public too.
- `airhost.messages` decodes a DMAP `mlit` listing with `iter_dmap_listing`
  (yielding `DmapItem` objects, raising `MetadataError` on malformed data),
  labels string tags with `describe_tag`, formats items with `format_item`
  and track progress with `format_progress`, and draws a PIN code as
  block-letter ASCII art with `create_pin_display`.
- `airhost.media` converts an AirPlay volume (-30..0 dB, -144 for mute) to a
  linear gain with `airplay_volume_to_gain`, optionally tapered and rescaled
  to a chosen dB range. `ClockSync` moves client timestamps of `AudioPacket`
  and `VideoPacket` onto the local clock with optional audio delays.
  `AudioDumper` and `VideoDumper` write audio packets and H.264 NAL units to
  numbered files; `write_coverart` writes cover-art bytes (a 1x1 PNG by
  default).
- `airhost.service` computes the 64-bit features word (`airplay_features`,
  `features_text`), explains mDNS registration error codes
  (`describe_dnssd_error`), applies allow/block lists (`ClientPolicy.admit`)
  and keeps the register of PIN-paired client keys (`PairingRegister`).
- `airhost.cli` resolves options into `Settings` with `resolve_settings` and
  provides the `airhost` command.

## Installation

```
pip install .
```

## Command line

```
airhost -h
```

prints the full option list, and `airhost -v` prints the version. Some
examples:

```
airhost -n Livingroom -nh
airhost -s 1280x720@60 -fps 30
airhost -p 7100,7000,7001
airhost -pin 1234 -reg
airhost -m 02:00:00:00:00:01
```

The command applies the startup file, then the arguments, and prints the
resolved setup: which of audio and video are in use, the MAC address (given,
taken from the system, or random), dump and key-file locations, and, with
`-d`, the advertised features code. With `-pin` and `-reg` it also reads the
pairing register. An invalid option prints a message and exits with status 1.

## Library use

```python
from airhost.options import Options, parse_arguments
from airhost.media import airplay_volume_to_gain

options = Options()
parse_arguments(["-s", "1280x720", "-db", "-40:-5"], options)
gain = airplay_volume_to_gain(-15.0, options.db_low, options.db_high, taper=False)
```

## What this package does not do

It does not run a receiver. Nothing here advertises the service over mDNS,
listens for AirPlay or RAOP connections, performs pairing or FairPlay
decryption, or decodes and displays video or plays audio. The `airhost`
command stops after reporting the resolved settings.

## Tests

```
pip install .[test]
pytest
```