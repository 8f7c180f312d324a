# =============================================================================
# test_dispatch.py - Overload Dispatch Tests
# =============================================================================
# Tests for type-directed operation selection: signature matching against
# the top of the stack, registration-order tie-break, and redefinition.
# =============================================================================

from stak.runtime.dispatch import NativeOperation, BodyOperation, Overload, OverloadSet
from stak.runtime.values import Type, Value


def noop(program):
    pass


def other(program):
    pass


INT = Value.integer(1)
FLOAT = Value.floating(1.0)
STR = Value.string("s")


class TestSignatureMatching:
    """Test Overload.matches against stack contents."""

    def test_exact(self):
        overload = Overload((Type.STRING, Type.INT), NativeOperation(noop))
        assert overload.matches([STR, INT])
        assert not overload.matches([INT, STR])

    def test_checks_only_the_top(self):
        overload = Overload((Type.STRING, Type.INT), NativeOperation(noop))
        assert overload.matches([FLOAT, FLOAT, STR, INT])

    def test_stack_too_short(self):
        overload = Overload((Type.ANY, Type.ANY), NativeOperation(noop))
        assert not overload.matches([INT])

    def test_empty_signature_always_matches(self):
        overload = Overload((), NativeOperation(noop))
        assert overload.matches([])

    def test_wildcard(self):
        overload = Overload((Type.ANY, Type.INT), NativeOperation(noop))
        assert overload.matches([STR, INT])
        assert overload.matches([FLOAT, INT])
        assert not overload.matches([INT, FLOAT])

    def test_describe(self):
        overload = Overload((Type.INT, Type.INT), NativeOperation(noop))
        assert overload.describe("+") == "[int int] +"


class TestOverloadSet:
    """Test candidate registration and selection."""

    def test_select_first_match(self):
        overloads = OverloadSet("f")
        overloads.define((Type.INT, Type.INT), NativeOperation(noop))
        overloads.define((Type.ANY, Type.ANY), NativeOperation(other))

        assert overloads.select([INT, INT]).implementation.function is noop
        assert overloads.select([STR, INT]).implementation.function is other

    def test_registration_order_breaks_ties(self):
        overloads = OverloadSet("f")
        overloads.define((Type.ANY,), NativeOperation(other))
        overloads.define((Type.INT,), NativeOperation(noop))

        assert overloads.select([INT]).implementation.function is other

    def test_no_match(self):
        overloads = OverloadSet("f")
        overloads.define((Type.INT,), NativeOperation(noop))
        assert overloads.select([STR]) is None
        assert overloads.select([]) is None

    def test_redefine_replaces_in_place(self):
        overloads = OverloadSet("f")
        first = NativeOperation(noop)
        overloads.define((Type.INT,), first)
        overloads.define((Type.ANY,), NativeOperation(noop))

        previous = overloads.define((Type.INT,), NativeOperation(other))

        assert previous is first
        assert len(overloads) == 2
        assert overloads.select([INT]).implementation.function is other

    def test_signatures(self):
        overloads = OverloadSet("+")
        overloads.define((Type.INT, Type.INT), NativeOperation(noop))
        overloads.define((Type.STRING, Type.CHAR), NativeOperation(noop))
        assert overloads.signatures() == ["[int int] +", "[str char] +"]

    def test_min_arity(self):
        overloads = OverloadSet(".")
        overloads.define((Type.STRING, Type.INT, Type.INT), NativeOperation(noop))
        overloads.define((Type.STRING, Type.INT), NativeOperation(noop))
        assert overloads.min_arity() == 2


class TestImplementations:
    """Test invoking native and body implementations."""

    def test_native_receives_program(self):
        seen = []
        NativeOperation(seen.append).invoke("program")
        assert seen == ["program"]

    def test_body_runs_through_program(self):
        class FakeProgram:
            def __init__(self):
                self.ran = []

            def run(self, node):
                self.ran.append(node)

        program = FakeProgram()
        BodyOperation("body").invoke(program)
        assert program.ran == ["body"]
