# launcher_core

Building blocks for a game launcher: finding out which game version is
installed and which is the latest, working out the update the game needs,
downloading and unpacking archives, checking game files against the
published integrity list, and managing a Linux patch kept in a git
repository.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

Listing and extracting `.7z` archives runs the `7z` program, a zip that
Python cannot extract is handed to `unzip`, and the patch repository is
synced with `git`; these need to be on `PATH` for those features.

## Versions and sizes

```python
from launcher_core.version import Version
from launcher_core.prettify import prettify_bytes

v = Version.from_str("1.10.2")   # None if the string is not "a.b.c" with parts 0..255
print(v, v.to_plain_string())    # 1.10.2 1102
print(v == "1.10.2", v < Version(1, 11, 0))   # True True

print(prettify_bytes(5 * 1024 * 1024))   # 5.00 MB
```

## Downloading and installing

```python
from launcher_core.installer.downloader import Downloader, DownloadingError
from launcher_core.installer.installer import Installer

downloader = Downloader("https://example.com/files/update.zip")
print(downloader.filename(), downloader.length())

try:
    downloader.download("/tmp/update.zip", lambda current, total: print(current, total))
except DownloadingError as err:
    print("download failed:", err)

installer = Installer("https://example.com/files/update.zip")
installer.install("/path/to/game", print)   # reports every step as an Update
```

A download resumes from an existing partial file unless
`continue_downloading` is set to `False`. Before it starts, the target disk
is checked with `launcher_core.installer.free_space`; `PathNotMountedError`
and `NoSpaceAvailableError` are raised when no disk holds the path or it
lacks space. `Installer.install` does not raise: failures arrive as `Update`
values whose `kind` is `UpdateKind.DOWNLOADING_ERROR` or
`UpdateKind.UNPACKING_ERROR`.

Supported archive formats are `.zip`, `.tar`, `.tar.gz`, `.tar.xz`,
`.tar.bz2` and `.7z`, chosen by file name; see
`launcher_core.installer.archives.Archive` (`open`, `entries`, `extract`).

## Game state and updates

```python
from launcher_core.star_rail.consts import GameEdition
from launcher_core.star_rail.game import Game

GameEdition.from_system_lang().select()

game = Game("/path/to/game", api_uri="https://example.com/launcher/api/resource")
print(game.is_installed(), game.version(), game.latest_version())

diff = game.try_get_diff()
print(diff.kind, diff.size(), diff.file_name())
diff.download_in("/tmp/updates", lambda current, total: print(current, total))
```

`VersionDiff.kind` is one of `DiffKind.LATEST`, `PREDOWNLOAD`, `DIFF`,
`OUTDATED` and `NOT_INSTALLED`. `download_in` and `download_to` raise
`AlreadyLatestError` or `OutdatedError` when there is nothing to download.
The launcher API response is parsed into `launcher_core.star_rail.schema.Response`
and cached per URI by `launcher_core.star_rail.api.request`.

## File integrity

```python
from launcher_core.star_rail.repair import get_integrity_files, get_unused_files

api = "https://example.com/launcher/api/resource"

for file in get_integrity_files(api):
    if not file.fast_verify("/path/to/game"):
        file.repair("/path/to/game")

print(get_unused_files("/path/to/game", api))
```

`fast_verify` compares only sizes; `verify` also compares MD5 hashes.
`launcher_core.repairer.get_unused_files` works on any folder and list of
used files. The game writes files of its own, so let the user decide what
to do with "unused" ones.

## Linux patch

```python
from launcher_core.star_rail.consts import GameEdition
from launcher_core.star_rail.linux_patch import Patch

patch = Patch("/path/to/patch-repo")
print(patch.sync("https://example.com/patch.git"))   # subjects of new commits

main = patch.main_patch(GameEdition.selected(), "https://example.com/launcher/api/resource")
print(main.status.state)
if not main.is_applied("/path/to/game"):
    main.apply("/path/to/game", use_root=False)
```

`apply` and `revert` run the patch's `install.sh` and `uninstall.sh` with
`bash` in the game folder and raise `RuntimeError` if they do not report
success.

## What this package does not do

- It does not install a `VersionDiff` in place: there is no step that applies
  the binary diff patches shipped in an update or removes the files an update
  lists as deleted. Use `Installer` to download and unpack an archive.
- It does not check whether telemetry servers are reachable or blocked.
- It has no built-in API addresses: every function that talks to the
  launcher API takes its URI as an argument.
- It offers no command-line program; it is a library only.