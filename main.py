from rich.pretty import pprint

from optline import *

__prog__ = "optline-demo"

parser = (
    Options()
    .add_short("o", Value(str).with_default("out.txt").named("out"), "output file")
    .add_long("flag", "a flag")
    .add_long("k", Value(int).unlimited().constrain(lambda x: x > 0).named("param-k"), "a multi-valued option")
    .add_long("scale", Value(float).with_defaults([1.0, 0.5]).limit(2).named("factor"), "scale factors")
    .add_long("verbose", "verbose output")
    .add_long("verbose=", Value(ValueType.UNSIGNED).named("level"), "verbosity level")
    .add_short("h", "show this help")
    .add_positional(Value(str).unlimited().named("file"), "input files")
    .build(shell=True, overflow_warnings=True)
)


if __name__ == '__main__':
    result = parser.parse()
    if result.used("h"):
        parser.print_help()
    else:
        pprint(result)
