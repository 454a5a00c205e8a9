#!/usr/bin/env python3
"""
s3files command line.

Usage:
    python -m s3files put ./photo.jpg --folder avatars --unique
    python -m s3files get uploads/avatars/<uuid>.jpg -o photo.jpg
    python -m s3files url uploads/avatars/<uuid>.jpg --attachment "my photo.jpg"
    python -m s3files ls --folder avatars --all
    python -m s3files exists uploads/avatars/<uuid>.jpg
    python -m s3files cp SRC DST [--meta k=v ...]
    python -m s3files mv SRC DST
    python -m s3files rm KEY [KEY ...]

Configuration comes from the environment (see FileManagerConfig.from_env):

    S3_REGION=eu-west-1 S3_BUCKET=uploads S3_BASE_PATH=uploads python -m s3files ls

Exit codes: 0 success, 1 object missing, 2 configuration or argument
error, 3 store error.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any, Optional, Sequence, TextIO

from botocore.exceptions import ClientError

from s3files.core.config import FileManagerConfig
from s3files.core.constants import DEFAULT_CONTENT_TYPE, MAX_LIST_PAGE
from s3files.core.errors import FileManagerError, is_not_found
from s3files.core.types import (
    CopyOptions,
    FileInput,
    ListOptions,
    SignedUrlOptions,
    StorageClass,
    UploadOptions,
)
from s3files.observability.logging import LogLevel, StructuredLogger, setup_logging
from s3files.storage.s3_store import S3FileManager

EXIT_OK = 0
EXIT_MISSING = 1
EXIT_USAGE = 2
EXIT_STORE = 3

logger = StructuredLogger("s3files.cli")


def _metadata_pair(value: str) -> tuple[str, str]:
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
    return key, val


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="python -m s3files",
        description="File operations on an S3-compatible bucket",
    )
    parser.add_argument(
        "--log-level",
        choices=[level.name for level in LogLevel],
        default="WARNING",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--env-prefix", default="S3", help="Environment variable prefix")

    sub = parser.add_subparsers(dest="command", required=True)

    put = sub.add_parser("put", help="Upload a local file")
    put.add_argument("path", type=Path)
    put.add_argument("--key", help="Full object key, used verbatim")
    put.add_argument("--folder")
    put.add_argument("--name", dest="file_name", help="Stored file name")
    put.add_argument("--unique", action="store_true", help="Store under a UUID name")
    put.add_argument("--content-type")
    put.add_argument(
        "--storage-class",
        choices=[sc.value for sc in StorageClass],
    )
    put.add_argument("--meta", type=_metadata_pair, action="append", default=[])

    get = sub.add_parser("get", help="Download an object")
    get.add_argument("key")
    get.add_argument("-o", "--output", type=Path, help="Write to file instead of stdout")

    url = sub.add_parser("url", help="Print a presigned retrieval URL")
    url.add_argument("key")
    url.add_argument("--expires", type=int, help="TTL in seconds")
    mode = url.add_mutually_exclusive_group()
    mode.add_argument("--inline", action="store_true")
    mode.add_argument(
        "--attachment",
        nargs="?",
        const="",
        metavar="FILE_NAME",
        help="Force download, optionally under FILE_NAME",
    )

    rm = sub.add_parser("rm", help="Delete one or more objects")
    rm.add_argument("keys", nargs="+")

    ls = sub.add_parser("ls", help="List objects")
    ls.add_argument("--folder")
    ls.add_argument("--prefix")
    ls.add_argument("--max", dest="max_results", type=int, default=MAX_LIST_PAGE)
    ls.add_argument("--token", dest="continuation_token")
    ls.add_argument("--all", action="store_true", help="Follow every page")

    exists = sub.add_parser("exists", help="Exit 0 if the object exists, 1 if not")
    exists.add_argument("key")

    for name, help_text in (("cp", "Server-side copy"), ("mv", "Copy then delete source")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("source")
        cmd.add_argument("destination")
        cmd.add_argument(
            "--meta",
            type=_metadata_pair,
            action="append",
            default=None,
            help="Replace metadata (repeatable KEY=VALUE)",
        )

    return parser


def _emit(out: TextIO, payload: Any) -> None:
    out.write(json.dumps(payload, default=str) + "\n")


async def execute(
    args: argparse.Namespace,
    fm: S3FileManager,
    out: TextIO,
) -> int:
    """
    Run one parsed command against a connected manager.

    Returns:
        Process exit code.
    """
    command = args.command

    if command == "put":
        data = args.path.read_bytes()
        guessed, _ = mimetypes.guess_type(args.path.name)
        file = FileInput(
            data=data,
            original_name=args.path.name,
            mime_type=guessed or DEFAULT_CONTENT_TYPE,
            size=len(data),
        )
        result = await fm.upload(file, UploadOptions(
            key=args.key,
            folder=args.folder,
            file_name=args.file_name,
            generate_unique_file_name=args.unique,
            content_type=args.content_type,
            metadata=dict(args.meta) or None,
            storage_class=StorageClass(args.storage_class) if args.storage_class else None,
        ))
        _emit(out, dataclasses.asdict(result))
        return EXIT_OK

    if command == "get":
        download = await fm.download(args.key, mode="stream")
        if download is None:
            logger.warning("Object not found", key=args.key)
            return EXIT_MISSING
        async with download.stream as stream:
            if args.output is not None:
                with args.output.open("wb") as sink:
                    async for chunk in stream:
                        sink.write(chunk)
            else:
                sink = sys.stdout.buffer
                async for chunk in stream:
                    sink.write(chunk)
                sink.flush()
        return EXIT_OK

    if command == "url":
        if args.inline:
            options = SignedUrlOptions(disposition="inline", expires_in=args.expires)
        elif args.attachment is not None:
            options = SignedUrlOptions(
                disposition="attachment",
                file_name=args.attachment or None,
                expires_in=args.expires,
            )
        else:
            options = SignedUrlOptions(expires_in=args.expires)
        out.write(await fm.get_signed_url(args.key, options) + "\n")
        return EXIT_OK

    if command == "rm":
        if len(args.keys) == 1:
            await fm.delete(args.keys[0])
        else:
            await fm.delete_many(args.keys)
        return EXIT_OK

    if command == "ls":
        options = ListOptions(
            folder=args.folder,
            prefix=args.prefix,
            max_results=args.max_results,
            continuation_token=args.continuation_token,
        )
        if args.all:
            async for entry in fm.list_all(options):
                _emit(out, dataclasses.asdict(entry))
        else:
            page = await fm.list(options)
            for entry in page.entries:
                _emit(out, dataclasses.asdict(entry))
            if page.has_more:
                _emit(out, {"continuation_token": page.continuation_token})
        return EXIT_OK

    if command == "exists":
        found = await fm.exists(args.key)
        out.write(("true" if found else "false") + "\n")
        return EXIT_OK if found else EXIT_MISSING

    if command in ("cp", "mv"):
        copy_options = CopyOptions(
            metadata=dict(args.meta) if args.meta is not None else None,
        )
        try:
            if command == "cp":
                await fm.copy(args.source, args.destination, copy_options)
            else:
                await fm.move(args.source, args.destination, copy_options)
        except ClientError as exc:
            if is_not_found(exc):
                logger.warning("Source object not found", key=args.source)
                return EXIT_MISSING
            raise
        return EXIT_OK

    raise ValueError(f"unknown command: {command}")


async def _run(
    args: argparse.Namespace,
    config: FileManagerConfig,
    out: TextIO,
) -> int:
    async with S3FileManager(config) as fm:
        return await execute(args, fm, out)


def main(argv: Optional[Sequence[str]] = None, out: Optional[TextIO] = None) -> int:
    """
    Parse arguments, load configuration and run the command.

    Returns:
        Process exit code.
    """
    out = out or sys.stdout
    args = build_parser().parse_args(argv)
    setup_logging(LogLevel[args.log_level], json_output=args.json_logs)

    try:
        config = FileManagerConfig.from_env(prefix=args.env_prefix)
    except FileManagerError as exc:
        sys.stderr.write(f"Configuration error: {exc}\n")
        return EXIT_USAGE

    try:
        return asyncio.run(_run(args, config, out))
    except FileManagerError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return EXIT_USAGE
    except ClientError as exc:
        error = exc.response.get("Error", {})
        sys.stderr.write(f"Store error: {error.get('Code')}: {error.get('Message')}\n")
        return EXIT_STORE
    except KeyboardInterrupt:
        sys.stderr.write("Interrupted\n")
        return 130


def run() -> None:
    """Synchronous entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
