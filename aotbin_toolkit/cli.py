"""AoT BIN Toolkit CLI."""

import logging
import shutil
import sys
from pathlib import Path
from typing import List, Optional

import click

from . import __version__
from .bin.header import DEFAULT_BLOCK_SIZE, TAG_INDEX, TAG_TYPE, FileType, Variant
from .fileinfo import FILE_INFO_NAME, FileInfo, load_file_info, save_file_info
from .tree import Node
from .utils.binary import Endianness

LOGGING_FORMAT = "[%(asctime)s][%(levelname)s]-%(name)s:%(funcName)s:%(lineno)d,%(message)s"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.WARNING, format=LOGGING_FORMAT)
    logging.getLogger("aotbin_toolkit").setLevel(logging.DEBUG if verbose else logging.WARNING)


def parse_int(ctx, param, value):
    """Accept decimal or prefixed (0x800) integers."""
    if value is None or isinstance(value, int):
        return value
    try:
        return int(value, 0)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not an integer")


def read_file_list(path: Optional[Path]) -> List[str]:
    """Read one archive path per line."""
    if path is None:
        return []
    return path.read_text(encoding="utf-8").splitlines()


workers_option = click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Worker threads for (de)compression (default: Python's pool default)",
)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """AoT BIN Toolkit - Extract, build and update Attack on Titan BIN archives.

    \b
    Supports both archive variants:
    - Standard archives (PC little-endian, PS3 big-endian), block aligned,
      with chunked zlib compression
    - DLC archives (flat offset/size tables, no compression)
    """
    configure_logging(verbose)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory (default: <archive_name>_extracted)",
)
@click.option(
    "--file-list",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Text file naming the archive entries, one path per line",
)
@click.option(
    "--list-only",
    is_flag=True,
    help="List files without extracting",
)
@click.option("-y", "--yes", is_flag=True, help="Delete an existing output directory without asking")
@workers_option
def extract(
    archive: Path,
    output: Optional[Path],
    file_list: Optional[Path],
    list_only: bool,
    yes: bool,
    workers: Optional[int],
):
    """Extract files from a BIN archive.

    A fileInfo.yaml listing each file's type and archive index is written
    next to the extracted files so the archive can be rebuilt.
    """
    from .bin import BinReader, decompress_nodes
    from .bin.writer import ordered_leaves

    click.echo(f"Opening: {archive}")

    try:
        file_names = read_file_list(file_list)
        if file_names:
            click.echo(f'Using "{file_list}" as file list...')

        reader = BinReader(archive, file_names)
        click.echo(f"Format:  {reader.variant.value}, {reader.endianness.name.lower()} endian")
        root = reader.read()

        if list_only:
            click.echo(f"\nFiles in archive ({reader.header.file_count}):")
            for node in ordered_leaves(root):
                click.echo(
                    f"  {node.tags[TAG_INDEX]:04d}  {node.tags[TAG_TYPE].name:<27}  "
                    f"{len(node.data):>10}  {node.relative_path(root)}"
                )
            return

        if root.child(FILE_INFO_NAME) is not None:
            raise ValueError(f"Archive entry {FILE_INFO_NAME!r} collides with the file info side-car")

        if output is None:
            output = archive.parent / f"{archive.stem}_extracted"

        if output.exists():
            click.echo("Output directory already exists. It will be deleted.")
            if not yes and not click.confirm("Continue?", default=False):
                click.echo("Cancelled by user.")
                return
            shutil.rmtree(output)

        click.echo(f"Output:  {output}")
        click.echo()

        decompress_nodes(root, reader.endianness, workers)

        infos = []
        with click.progressbar(
            list(root.iterate_leaves()),
            label="Extracting",
            item_show_func=lambda n: n.name if n else "",
        ) as nodes:
            for node in nodes:
                output_path = output / node.relative_path(root)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_bytes(node.data)
                infos.append(FileInfo.from_node(node, root))

        output.mkdir(parents=True, exist_ok=True)
        save_file_info(output / FILE_INFO_NAME, infos)

        click.echo()
        click.echo(f"Extracted: {len(infos)} files")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output BIN file",
)
@click.option("--big-endian", is_flag=True, help="Create using big endian (for PS3)")
@click.option("--dlc", is_flag=True, help="Create as DLC archive")
@click.option(
    "--block-size",
    default=hex(DEFAULT_BLOCK_SIZE),
    callback=parse_int,
    show_default=True,
    help="Block alignment for standard archives",
)
@click.option(
    "--compress/--no-compress",
    default=False,
    help="Compress files when no fileInfo.yaml is present",
)
@workers_option
def build(
    input_dir: Path,
    output: Path,
    big_endian: bool,
    dlc: bool,
    block_size: int,
    compress: bool,
    workers: Optional[int],
):
    """Build a BIN archive from a directory.

    If the directory holds a fileInfo.yaml (written by extract), entry
    order and types come from it. Otherwise every file is added in sorted
    path order.
    """
    from .bin import WriterParameters, write_bin

    try:
        root = load_directory_tree(input_dir, compress)
        params = WriterParameters(
            endianness=Endianness.BIG if big_endian else Endianness.LITTLE,
            block_size=block_size,
            variant=Variant.DLC if dlc else Variant.STANDARD,
            max_workers=workers,
        )

        click.echo(f"Building: {output}")
        data = write_bin(root, params)
        output.write_bytes(data)

        click.echo(f"Files:    {sum(1 for _ in root.iterate_leaves())}")
        click.echo(f"Size:     {len(data)} bytes")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output BIN file",
)
@click.option(
    "--file-list",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Text file naming the archive entries, one path per line",
)
@workers_option
def update(archive: Path, input_dir: Path, output: Path, file_list: Optional[Path], workers: Optional[int]):
    """Replace files inside a BIN archive.

    Every file in INPUT_DIR replaces the archive entry with the same
    relative path. Untouched compressed entries are copied as they are.
    """
    from .bin import update_bin

    try:
        changes = {
            path.relative_to(input_dir).as_posix(): path.read_bytes()
            for path in sorted(input_dir.rglob("*"))
            if path.is_file() and path != input_dir / FILE_INFO_NAME
        }

        click.echo(f"Updating: {archive}")
        data, result = update_bin(archive.read_bytes(), changes, read_file_list(file_list), workers)

        for error in result.not_found:
            click.echo(f"  Not found: {error.path}")

        output.write_bytes(data)

        click.echo(f"Updated:  {len(result.updated)} files")
        click.echo(f"Created:  {output}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def load_directory_tree(input_dir: Path, compress: bool = False) -> Node:
    """Build an entry tree from a directory, honouring fileInfo.yaml if present."""
    root = Node("root")
    info_path = input_dir / FILE_INFO_NAME

    if info_path.exists():
        for info in sorted(load_file_info(info_path), key=lambda i: i.index):
            file_type = info.file_type
            file_path = input_dir / info.name
            if file_type in (FileType.EMPTY, FileType.DUMMY) and not file_path.exists():
                data = b""
            else:
                data = file_path.read_bytes()

            sub_path, _, name = info.name.rpartition("/")
            root.add_at(sub_path, Node(name, data, {TAG_TYPE: file_type, TAG_INDEX: info.index}))
        return root

    file_type = FileType.COMPRESSED if compress else FileType.NORMAL
    files = sorted(p for p in input_dir.rglob("*") if p.is_file())
    for index, path in enumerate(files, start=1):
        sub_path = "/".join(path.relative_to(input_dir).parts[:-1])
        root.add_at(sub_path, Node(path.name, path.read_bytes(), {TAG_TYPE: file_type, TAG_INDEX: index}))
    return root


if __name__ == "__main__":
    main()
