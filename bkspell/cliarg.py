# Copyright 2015, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
from .argx import arg

arg.file = arg("-f", "--file", help="Text file to check (default: read standard input)")
arg.force = arg(
    "--force",
    help="Rebuild even if cached indexes are up to date",
    action="store_true",
    default=False,
)
arg.json = arg("--json", help="Raw json output", action="store_true", default=False)
arg.output = arg("-o", "--output", help="Write the result to this file instead of standard output")
arg.word = arg("word", help="Word to look up")
