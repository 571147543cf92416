"""
Command Line Interface for the Motorsport Manager Practice Driver Fixer

Usage:
    python -m mm_save_fixer <save> [output] --car1 NAME --car2 NAME --reserve NAME

Or:
    python -m mm_save_fixer --show <save>
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import SAVE_EXTENSION, default_save_dir
from .container import SaveContainer
from .errors import SaveFixerError
from .file_io import PathState, query_path
from .fixer import PracticeDriverFixer, suggested_output_path, save_name_from_path
from .save_file import SaveFile


def print_progress(message: str, percent: int):
    """Print progress to console"""
    if percent >= 0:
        print(f"[{percent:3d}%] {message}")
    else:
        print(f"       {message}")


def hexdump(data: bytes, start: int = 0, length: int = 64) -> str:
    """Create a hex dump of data[start:start + length]"""
    result = []
    end = min(len(data), start + length)
    for i in range(start, end, 16):
        chunk = data[i:min(i + 16, end)]
        hex_part = ' '.join(f'{b:02X}' for b in chunk)
        ascii_part = ''.join(chr(b) if 32 <= b < 127 else '.' for b in chunk)
        result.append(f'{i:08X}  {hex_part:<48}  {ascii_part}')
    return '\n'.join(result)


def format_drivers(save: SaveFile) -> str:
    lines = []
    for number, driver in enumerate(save.drivers, start=1):
        marker = "" if driver.position == driver.original_position else \
            f"  (was {driver.original_position.label})"
        lines.append(f"  {number}. {driver.name:<30} {driver.position.label}{marker}")
    return "\n".join(lines)


def show_save(filepath: str):
    """Show the save name and the team's drivers"""
    try:
        save = SaveFile.open(Path(filepath))
    except SaveFixerError as e:
        print(f"Error: {e}")
        return 1

    print(f"\nSave: {save.save_name}")
    print(f"File: {Path(filepath).name}")
    print("\nDrivers:")
    print(format_drivers(save))

    if not save.positions_are_unique():
        print("\n⚠️ Two drivers share a position. Reassign them with --car1/--car2/--reserve.")
    return 0


def inspect_save(filepath: str):
    """Show container details and the bytes around each driver's mCarID"""
    print(f"\nInspecting: {filepath}")
    print("=" * 60)

    try:
        container = SaveContainer.load(Path(filepath))
        save = SaveFile(container)
    except SaveFixerError as e:
        print(f"Error: {e}")
        return 1

    stats = container.get_statistics()
    print(f"\nVersion:           {stats['version']}")
    print(f"Info block:        {stats['compressed_info_size']:,} -> {stats['decompressed_info_size']:,} bytes")
    print(f"Data block:        {stats['compressed_data_size']:,} -> {stats['decompressed_data_size']:,} bytes")

    offset, size = save.save_name_span
    print(f"\nSave name:         {save.save_name!r} (info offset {offset}, {size} bytes)")

    for number, driver in enumerate(save.drivers, start=1):
        print(f"\nDriver {number}: {driver.name} - {driver.position.label} (data offset {driver.offset})")
        print(hexdump(save.data, max(0, driver.offset - 24), 48))

    return 0


def list_saves():
    """List save files in the default save folder"""
    folder = default_save_dir()
    saves = sorted(folder.glob(f"*{SAVE_EXTENSION}"), key=lambda p: p.stat().st_mtime, reverse=True)

    print(f"\nSaves in {folder}:")
    if not saves:
        print("  (none)")
    for path in saves:
        print(f"  • {path.name}")
    return 0


def fix_file(args) -> int:
    """Reassign drivers and write a fixed save"""
    print("\n🏎️ Motorsport Manager Practice Driver Fixer")
    print("=" * 60)

    fixer = PracticeDriverFixer(print_progress)

    try:
        print(f"\n📂 Loading: {args.files[0]}")
        fixer.load(Path(args.files[0]))
        print(f"   Save: {fixer.get_save_name()}")
        print(format_drivers(fixer.save_file))

        if args.swap:
            fixer.swap_cars()
        if args.car1 is not None or args.car2 is not None or args.reserve is not None:
            fixer.assign(car1=args.car1, car2=args.car2, reserve=args.reserve)
    except SaveFixerError as e:
        print(f"\n❌ Error: {e}")
        return 1

    output = Path(args.files[1]) if len(args.files) > 1 else suggested_output_path(Path(args.files[0]))
    save_name = args.name if args.name is not None else save_name_from_path(output)

    # Check if output exists
    allow_overwrite = args.force
    state = query_path(output)
    if state == PathState.DIRECTORY:
        print(f"\n❌ Error: {output} is a directory")
        return 1
    if state != PathState.DOES_NOT_EXIST and not allow_overwrite:
        response = input(f"\n⚠️ Output file already exists: {output}\nOverwrite? (y/n): ")
        if response.lower() not in ['y', 'yes']:
            print("Cancelled.")
            return 0
        allow_overwrite = True

    print("\nNew positions:")
    print(format_drivers(fixer.save_file))
    print(f"\n💾 Writing to: {output}")

    result = fixer.fix(output, save_name, allow_overwrite)

    if result.success:
        print("\n" + "=" * 60)
        print("✅ FIXED SAVE WRITTEN")
        print("=" * 60)
        print(f"\n📁 File: {result.output_file}")
        print(f"   Save name: {result.save_name}")
        for change in result.changed_drivers:
            print(f"   • {change}")

        if result.warnings:
            print("\n⚠️ Warnings:")
            for warning in result.warnings:
                print(f"   • {warning}")
        return 0

    print("\n❌ WRITING FAILED")
    for error in result.errors:
        print(f"   Error: {error}")
    return 1


def main(argv=None):
    """Main entry point for CLI"""
    parser = argparse.ArgumentParser(
        description='Motorsport Manager Practice Driver Fixer - put your drivers back in the right cars',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Show the drivers in a save:
    python -m mm_save_fixer --show career.sav

  Put drivers in specific cars (names or numbers from --show):
    python -m mm_save_fixer career.sav --car1 Hamilton --car2 2 --reserve 3

  Swap the two race drivers and write to a chosen file:
    python -m mm_save_fixer career.sav career_fixed.sav --swap

  Overwrite without asking:
    python -m mm_save_fixer -f career.sav career_fixed.sav --car1 Hamilton
"""
    )

    parser.add_argument(
        '--show', '-s',
        metavar='FILE',
        help='Show the save name and drivers of a save file'
    )

    parser.add_argument(
        '--inspect', '-i',
        metavar='FILE',
        help='Show container details and where each driver is stored'
    )

    parser.add_argument(
        '--list', '-l',
        action='store_true',
        help='List saves in the Motorsport Manager save folder'
    )

    parser.add_argument('--car1', metavar='DRIVER', help='Driver for car 1 (name or number)')
    parser.add_argument('--car2', metavar='DRIVER', help='Driver for car 2 (name or number)')
    parser.add_argument('--reserve', metavar='DRIVER', help='Reserve driver (name or number)')

    parser.add_argument(
        '--swap',
        action='store_true',
        help='Exchange the car 1 and car 2 drivers'
    )

    parser.add_argument(
        '--name', '-n',
        metavar='NAME',
        help='Save name shown in the game (default: output file name)'
    )

    parser.add_argument(
        '--force', '-f',
        action='store_true',
        help='Overwrite output without asking'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show debug logging'
    )

    parser.add_argument(
        'files',
        nargs='*',
        metavar='FILE',
        help='Save files: <input> [output]'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if args.list:
        return list_saves()

    if args.show:
        return show_save(args.show)

    if args.inspect:
        return inspect_save(args.inspect)

    if 1 <= len(args.files) <= 2:
        return fix_file(args)

    if len(args.files) > 2:
        print("Error: expected <input> [output]")
        return 1

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
