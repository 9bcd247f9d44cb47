import random

from metacli import *

interface = {
    "description": "Demonstration program for metacli.",
    "package": {"name": "metacli-demo", "version": "0.0.0"},
    "members": {
        "foo": {
            "kind": "objectProperty",
            "description": "Tests foozball.",
            "dataType": {"type": {"kind": "objectType", "members": {
                "name": {
                    "kind": "scalarProperty",
                    "description": "Gets the dude's first name",
                    "dataType": {"type": "string"},
                },
                "stuff": {
                    "kind": "method",
                    "description": "Gets some random stuff.",
                    "parameters": [],
                    "returnDataType": "void",
                },
                "bar": {
                    "kind": "method",
                    "description": (
                        "Uses bats to transform bazzes in a barological pattern. This is completely "
                        "irreversible and may cause the destruction of the universe."
                    ),
                    "parameters": [
                        {"name": "baz", "dataType": {"type": "string"}, "description": "The baz to use for the process."},
                        {"name": "bat", "dataType": {"type": "string", "nullable": True}, "description": "The bat to apply."},
                    ],
                    "returnDataType": "void",
                },
            }}},
        },
        "goob": {
            "kind": "objectProperty",
            "description": "Manages goobers.",
            "aliases": ["g"],
            "dataType": {"type": {"kind": "objectType", "members": {
                "middleName": {
                    "kind": "scalarProperty",
                    "description": "Gets the dude's middle name.",
                    "dataType": {"type": "string"},
                },
                "lastName": {
                    "kind": "scalarProperty",
                    "description": "Gets the dude's last name.",
                    "dataType": {"type": "string"},
                },
            }}},
        },
        "version": {
            "kind": "method",
            "description": "Gets the version of the app.",
            "parameters": [],
            "returnDataType": {"type": "string"},
        },
    },
}


def bar(baz, bat=None):
    print(baz)
    print(bat)


program = {
    "foo": {
        "name": "shawn",
        "stuff": lambda: print(random.random()),
        "bar": bar,
    },
    "goob": {
        "middleName": "cameron",
        "lastName": "tabai",
    },
    "version": lambda *unused: description.package.version or "unknown",
}

description = load(interface)


if __name__ == '__main__':
    run(program, description, command_name="demo", auto_help=True)
