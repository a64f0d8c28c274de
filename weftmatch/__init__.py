__version__ = "0.1.0"

from weftmatch.operator import Alt, Dot, Plus, QMark, Repeat, Star, compile_pattern
from weftmatch.thompson import (
    Instruction,
    Jump,
    Pattern,
    PreferNext,
    PreferTarget,
    Program,
    ProgramCounterError,
    Step,
    thompson_vm,
)
from weftmatch.weight import (
    AnySymbol,
    FnStep,
    InclusiveRange,
    KeySet,
    Literal,
    SymbolStep,
    Trivial,
    Weight,
)
