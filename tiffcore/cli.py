"""CLI interface for tiffcore -- info, tags, validate subcommands."""

import json
import logging
import sys
from pathlib import Path

import click

import tiffcore
from tiffcore.config import ParserConfig
from tiffcore.errors import TiffError
from tiffcore.file import TiffFile
from tiffcore.log import (
    cli_bold,
    cli_dim,
    cli_error,
    cli_header,
    cli_info,
    cli_separator,
    cli_success,
    cli_warning,
    log_error,
    log_info,
    log_warn,
)
from tiffcore.tiff.values import decode_tag_value

# Longest value preview printed by `tags` before it is cut short
PREVIEW_LENGTH = 60


def _preview(value) -> str:
    text = repr(value.to_python())
    if len(text) > PREVIEW_LENGTH:
        return text[:PREVIEW_LENGTH - 3] + '...'
    return text


def _load_config(config_path):
    if not config_path:
        return None
    try:
        return ParserConfig.from_json(config_path)
    except (OSError, ValueError) as e:
        click.echo(cli_error(f'Error: cannot load config {config_path}: {e}'), err=True)
        sys.exit(1)


def _open(path, config=None) -> TiffFile:
    try:
        return TiffFile.open(path, config)
    except TiffError as e:
        click.echo(cli_error(f'Error: {Path(path).name}: {e}'), err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=tiffcore.__version__, prog_name='tiffcore')
@click.option('--debug', is_flag=True, help='Enable debug logging.')
def main(debug):
    """tiffcore -- Structural TIFF inspector.

    Read the header, walk the directory chain and decode tag values
    of TIFF files without touching the image data.
    """
    if debug:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(levelname)s %(name)s: %(message)s')


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--json-out', type=click.Path(), help='Write results as JSON to file.')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Parser configuration JSON file.')
def info(path, json_out, config_path):
    """Show the structure of a TIFF file: byte order, directories, images."""
    config = _load_config(config_path)
    with _open(path, config) as tiff:
        try:
            valid = tiff.is_valid()
        except TiffError as e:
            click.echo(cli_warning(f'Warning: main directory unreadable: {e}'), err=True)
            valid = False
        click.echo(cli_header(f'File: {Path(path).name}'))
        click.echo(f'Byte order: {tiff.byte_order}')
        click.echo(f'First IFD offset: {tiff.header.first_ifd_offset}')
        click.echo(f'Directories: {tiff.image_count()}')
        click.echo(f'Valid: {cli_success("yes") if valid else cli_error("no")}')

        images = []
        for index, directory in enumerate(tiff.directories):
            entry = {'index': index, 'offset': directory.offset, 'entries': len(directory)}
            try:
                summary = tiff.image_summary(index)
            except TiffError as e:
                entry['error'] = str(e)
                click.echo(f'  [{index}] ' + cli_warning(f'unreadable: {e}'))
            else:
                entry.update(summary.to_dict())
                click.echo(f'  [{index}] {summary.description()} '
                           + cli_dim(f'({len(directory)} tags @ {directory.offset})'))
            images.append(entry)

        if json_out:
            with open(json_out, 'w') as f:
                json.dump({
                    'file': str(path),
                    'byte_order': str(tiff.byte_order),
                    'first_ifd_offset': tiff.header.first_ifd_offset,
                    'directory_count': tiff.image_count(),
                    'is_valid': valid,
                    'directories': images,
                }, f, indent=2)
            click.echo(f'Results written to {json_out}')


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--directory', '-d', 'index', type=int, default=0, show_default=True,
              help='Directory index to list.')
@click.option('--json-out', type=click.Path(), help='Write results as JSON to file.')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Parser configuration JSON file.')
def tags(path, index, json_out, config_path):
    """List every tag of one directory with its decoded value.

    A tag whose value cannot be decoded is reported and the listing
    continues with the next one.
    """
    config = _load_config(config_path)
    with _open(path, config) as tiff:
        directory = tiff.get_directory(index)
        if directory is None:
            click.echo(cli_error(f'Error: directory {index} does not exist '
                                 f'({tiff.image_count()} available)'), err=True)
            sys.exit(1)

        click.echo(cli_header(f'{Path(path).name} -- directory {index} '
                              f'({len(directory)} entries)'))
        click.echo(cli_separator())

        rows = []
        for entry in directory:
            row = {'tag': entry.tag_id, 'name': entry.tag_name,
                   'type': entry.dtype, 'count': entry.count}
            try:
                type_name = entry.field_type.name
                row['inline'] = entry.is_inline
                value = decode_tag_value(entry, tiff.source, tiff.byte_order, tiff.config)
            except TiffError as e:
                row['error'] = str(e)
                click.echo(f'{entry.tag_id:>6} {cli_bold(entry.tag_name):<28} '
                           + cli_warning(f'ERROR: {e}'))
            else:
                row['type'] = type_name
                row['value'] = value.to_python()
                where = 'inline' if entry.is_inline else f'@{entry.value_slot}'
                click.echo(f'{entry.tag_id:>6} {cli_bold(entry.tag_name):<28} '
                           f'{type_name:<9} x{entry.count:<6} '
                           + cli_dim(f'{where:<10} ') + cli_info(_preview(value)))
            rows.append(row)

        if json_out:
            with open(json_out, 'w') as f:
                json.dump({'file': str(path), 'directory': index, 'tags': rows}, f, indent=2)
            click.echo(f'Results written to {json_out}')


def _unreadable_directories(tiff):
    """Indices of directories whose summary fails to decode."""
    bad = []
    for index in range(tiff.image_count()):
        try:
            tiff.image_summary(index)
        except TiffError:
            bad.append(index)
    return bad


@main.command()
@click.argument('paths', nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False))
@click.option('--log', type=click.Path(), help='Write log to file.')
def validate(paths, log):
    """Check that each file parses and describes a locatable image.

    A valid file whose other directories cannot be summarised is still
    counted as valid, with a warning. Exits with status 1 if any file
    fails.
    """
    log_file = open(log, 'w') if log else None
    failed = 0

    for path in paths:
        name = Path(path).name
        try:
            with TiffFile.open(path) as tiff:
                valid = tiff.is_valid()
                count = tiff.image_count()
                unreadable = _unreadable_directories(tiff) if valid else []
        except TiffError as e:
            failed += 1
            click.echo(f'{name}: ' + cli_error(f'INVALID ({e})'))
            if log_file:
                log_file.write(log_error(f'{path}: {e}') + '\n')
            continue

        if valid and unreadable:
            indices = ', '.join(str(i) for i in unreadable)
            message = f'OK ({count} directories, unreadable: {indices})'
            click.echo(f'{name}: ' + cli_warning(message))
            if log_file:
                log_file.write(log_warn(f'{path}: {message}') + '\n')
        elif valid:
            click.echo(f'{name}: ' + cli_success(f'OK ({count} directories)'))
            if log_file:
                log_file.write(log_info(f'{path}: OK ({count} directories)') + '\n')
        else:
            failed += 1
            reason = 'no directories' if count == 0 else 'missing image size or data layout'
            click.echo(f'{name}: ' + cli_error(f'INVALID ({reason})'))
            if log_file:
                log_file.write(log_error(f'{path}: {reason}') + '\n')

    click.echo(f'\nSummary: {len(paths)} file(s) checked, {len(paths) - failed} valid, '
               f'{failed} invalid')

    if log_file:
        log_file.close()

    if failed:
        sys.exit(1)


if __name__ == '__main__':
    main()
