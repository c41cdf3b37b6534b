import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import SplitResult, urlsplit
from uuid import UUID

from rich.logging import RichHandler

from quarrel import *
from quarrel import logs

LOG = logging.getLogger("quarrel.example")

RESOURCES = {
    "example.everything.long": (
        "A command that declares every kind of parameter.\n"
        "Named parameters come first; the three integers follow them."
    ),
}

P_FILE = Named01("--0file", str, "A file.", alternatives=("-x", "-y", "-z"))
P_NUMBER = Named01("--1number", int, "A number.", default=23)
P_NUMBER_OPT = Named1("--2number-opt", int, "A required number.")
P_DATE = Named1("--3date", datetime, "A date.", default=datetime.now(timezone.utc))
P_NET = Named0N("--4net", str, "Network addresses.")
P_UUID = Named0N("--5uuid", UUID, "UUIDs.", default=(UUID("f545455c-058e-4af2-96fc-9e5986b6cc99"),))
P_PATH = Named1N("--6path", Path, "Paths.")
P_URI = Named1N("--7uri", SplitResult, "URIs.", default=urlsplit("urn:x"))

X = Positional("x", int, "The X value.")
Y = Positional("y", int, "The Y value.")
Z = Positional("z", int, "The Z value.")


@command(
    "cmd-everything",
    "A command with every kind of parameter.",
    Localize("example.everything.long"),
    named=(P_FILE, P_NUMBER, P_NUMBER_OPT, P_DATE, P_NET, P_UUID, P_PATH, P_URI),
    positionals=PositionalsTyped(X, Y, Z),
)
def everything(context):
    for parameter in (P_FILE, P_NUMBER, P_NUMBER_OPT, P_DATE, P_NET, P_UUID, P_PATH, P_URI, X, Y, Z):
        LOG.info("%s: %r", parameter.name, context.parameter_value(parameter))


P_CMD1_FILE = Named01("--file", str, "A file.")


@command("cmd-1", "Command 1.", named=logs.plus_parameters((P_CMD1_FILE,)))
def cmd_1(context):
    logs.configure(context)
    LOG.debug("file: %r", context.parameter_value(P_CMD1_FILE))


@command("meta", "Display hidden application metadata.", positionals=PositionalsAny())
def meta(context):
    match context.parameters_positional_raw:
        case ("converters", *_):
            for name in sorted(converter.type.__qualname__ for converter in context.value_converters.converters()):
                context.output.print(name, markup=False, highlight=False)


@command("cat", "Hear a cat speak.")
def cat(context):
    context.output.print("Meow.")


@command("dog", "Hear a dog speak.")
def dog(context):
    context.output.print("Woof.")


@command("cow", "Hear a cow speak.")
def cow(context):
    context.output.print("Moo.")


def application():
    builder = Application.builder(ApplicationMetadata(
        "quarrel",
        "com.io7m.quarrel.example",
        "1.2.0",
        "eacd59a2",
        "The Quarrel example application.",
        "https://www.io7m.com/software/quarrel/",
    ))
    builder.set_application_resources(RESOURCES)
    builder.set_converters(logs.converters(ConverterDirectory.core()))
    builder.add_command(everything)
    builder.add_command(cmd_1)
    builder.add_command(meta)
    builder.add_command(structural("xstructural", hidden=True))
    (
        builder.create_group(CommandMetadata("animal", "Hear an animal speak.", "A long description."))
        .add_command(cat)
        .add_command(dog)
        .add_command(cow)
    )
    return builder.build()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(message)s", handlers=[RichHandler(show_path=False, markup=False)])
    sys.exit(application().run(LOG, sys.argv[1:]))
