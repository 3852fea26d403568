"""Tests for the Code Correctness rules."""

from __future__ import annotations

from impactlens.scoring.models import Diagnostic, MetricName, Severity
from impactlens.scoring.rules import correctness
from impactlens.scoring.scorer import ConfidenceScorer


# =============================================================================
# Syntax
# =============================================================================


class TestSyntax:
    """Syntax diagnostics, conflict markers and bracket balance."""

    def test_syntax_diagnostic_on_changed_line(self, make_ctx) -> None:
        ctx = make_ctx(
            "const a = ;\nconst b = 1;",
            changed=(1,),
            diagnostics=(
                Diagnostic(1, "Unexpected token ';'", Severity.ERROR),
                Diagnostic(2, "Unexpected token", Severity.ERROR),
            ),
        )

        outcome = correctness.syntax_diagnostics.evaluate(ctx)

        assert outcome.delta == -40
        assert [i.line for i in outcome.issues] == [1]

    def test_non_syntax_error_is_not_counted(self, make_ctx) -> None:
        ctx = make_ctx("x", diagnostics=(Diagnostic(1, "Cannot find name 'x'", Severity.ERROR),))
        assert correctness.syntax_diagnostics.evaluate(ctx).delta == 0

    def test_conflict_markers(self, make_ctx) -> None:
        ctx = make_ctx("<<<<<<< HEAD\na\n=======\nb\n>>>>>>> feature")

        outcome = correctness.conflict_markers.evaluate(ctx)

        assert outcome.delta == -40
        assert [i.line for i in outcome.issues] == [1, 3, 5]
        assert outcome.tags == ("conflict_markers",)

    def test_small_bracket_imbalance_is_tolerated(self, make_ctx) -> None:
        assert correctness.bracket_balance.evaluate(make_ctx("f((a)")).delta == 0

    def test_large_bracket_imbalance(self, make_ctx) -> None:
        outcome = correctness.bracket_balance.evaluate(make_ctx("f(((((a"))
        assert outcome.delta == -20
        assert "5 open, 0 close" in outcome.issues[0].message


# =============================================================================
# Type safety
# =============================================================================


class TestTypeSafety:
    """Type diagnostics and untyped parameters."""

    def test_type_diagnostic(self, make_ctx) -> None:
        ctx = make_ctx(
            "add('1', 2);",
            diagnostics=(Diagnostic(1, "Argument of type 'string' is not assignable", Severity.ERROR),),
        )
        assert correctness.type_diagnostics.evaluate(ctx).delta == -20

    def test_untyped_function_params(self, make_ctx) -> None:
        outcome = correctness.untyped.evaluate(make_ctx("function f(a, b) {"))
        assert outcome.delta == -5
        assert "parameters without types" in outcome.issues[0].message

    def test_explicit_any(self, make_ctx) -> None:
        outcome = correctness.untyped.evaluate(make_ctx("let x: any = 1;"))
        assert outcome.issues[0].message == "Explicit any type"

    def test_untyped_penalty_is_capped(self, make_ctx) -> None:
        text = "\n".join(f"let v{i}: any = {i};" for i in range(6))
        assert correctness.untyped.evaluate(make_ctx(text)).delta == -15

    def test_untyped_only_applies_to_typescript(self, make_ctx) -> None:
        ctx = make_ctx("function f(a, b) {", language="javascript")
        assert correctness.untyped.evaluate(ctx).delta == 0

    def test_unguarded_access(self, make_ctx) -> None:
        assert correctness.unguarded_access.evaluate(make_ctx("user.profile.get(id);")).delta == -10

    def test_guarded_access(self, make_ctx) -> None:
        ctx = make_ctx("if (user !== null) {\n  user.profile.get(id);\n}")
        assert correctness.unguarded_access.evaluate(ctx).delta == 0


# =============================================================================
# Static bugs
# =============================================================================


class TestStaticBugs:
    """Error diagnostics, unreachable code, missing returns and eval."""

    def test_error_diagnostics_count_every_error(self, make_ctx) -> None:
        ctx = make_ctx(
            "a\nb",
            diagnostics=(
                Diagnostic(1, "boom", Severity.ERROR),
                Diagnostic(2, "bang", Severity.ERROR),
                Diagnostic(2, "meh", Severity.WARNING),
            ),
        )
        assert correctness.error_diagnostics.evaluate(ctx).delta == -80

    def test_unreachable_after_return(self, make_ctx) -> None:
        outcome = correctness.unreachable_code.evaluate(make_ctx("return a;\ncleanup();"))
        assert outcome.delta == -20
        assert outcome.issues[0].line == 1

    def test_missing_return(self, make_ctx) -> None:
        ctx = make_ctx("function total(a: number): number {\n  log(a);\n}")
        assert correctness.missing_return.evaluate(ctx).delta == -20

    def test_typed_function_with_return(self, make_ctx) -> None:
        ctx = make_ctx("function total(a: number): number {\n  return a;\n}")
        assert correctness.missing_return.evaluate(ctx).delta == 0

    def test_dynamic_eval(self, make_ctx) -> None:
        outcome = correctness.dynamic_eval.evaluate(make_ctx("eval(input);"))
        assert outcome.delta == -40
        assert outcome.issues[0].message == "Unsafe eval() detected"
        assert outcome.tags == ("dynamic_eval",)

    def test_eval_needs_word_boundary(self, make_ctx) -> None:
        assert correctness.dynamic_eval.evaluate(make_ctx("retrieval(input);")).delta == 0


# =============================================================================
# Complexity
# =============================================================================


class TestComplexity:
    """Control flow, nesting, diff size and repetition."""

    def test_five_branches_are_fine(self, make_ctx) -> None:
        ctx = make_ctx("if (a && b || c) { for (;;) { while (x) {} } }")
        assert correctness.control_flow.evaluate(ctx).delta == 0

    def test_more_than_five_branches(self, make_ctx) -> None:
        ctx = make_ctx("if (a && b || c) { for (;;) { while (x) { switch (y) {} } } }")
        outcome = correctness.control_flow.evaluate(ctx)
        assert outcome.delta == -15
        assert "6 control flow statements" in outcome.issues[0].message

    def test_branch_words_need_boundaries(self, make_ctx) -> None:
        ctx = make_ctx("const diff = format(iffy, forward, whilst, cases, catcher, switches);")
        assert correctness.control_flow.evaluate(ctx).delta == 0

    def test_deep_nesting(self, make_ctx) -> None:
        outcome = correctness.nesting.evaluate(make_ctx("a\n" + " " * 24 + "b"))
        assert outcome.delta == -10
        assert outcome.issues[0].line == 2

    def test_diff_size(self, make_ctx) -> None:
        text = "\n".join(f"line{i}" for i in range(51))
        assert correctness.diff_size.evaluate(make_ctx(text)).delta == -10

    def test_repetition(self, make_ctx) -> None:
        text = "\n".join(["console.log('hello');"] * 3)
        outcome = correctness.repetition.evaluate(make_ctx(text))
        assert outcome.delta == -5
        assert "3 occurrences" in outcome.issues[0].message


# =============================================================================
# Style
# =============================================================================


class TestStyle:
    """Warning diagnostics, naming and magic numbers."""

    def test_warning_and_hint_diagnostics(self, make_ctx) -> None:
        ctx = make_ctx(
            "a\nb",
            diagnostics=(
                Diagnostic(1, "unused variable", Severity.WARNING),
                Diagnostic(2, "prefer const", Severity.HINT),
            ),
        )
        assert correctness.style_diagnostics.evaluate(ctx).delta == -13

    def test_mixed_naming(self, make_ctx) -> None:
        assert correctness.mixed_naming.evaluate(make_ctx("const fooBar = foo_bar;")).delta == -5

    def test_magic_numbers(self, make_ctx) -> None:
        assert correctness.magic_numbers.evaluate(make_ctx("wait(1000);")).delta == -5

    def test_named_constants_are_fine(self, make_ctx) -> None:
        assert correctness.magic_numbers.evaluate(make_ctx("const TIMEOUT = 1000;")).delta == 0


# =============================================================================
# Safety guards
# =============================================================================


class TestSafetyGuards:
    def test_unguarded_index_access(self, make_ctx) -> None:
        outcome = correctness.risky_operations.evaluate(make_ctx("const v = items[0];"))
        assert outcome.delta == -15
        assert outcome.issues[0].message == "Array/index access without safety guards"

    def test_guards_earn_a_bonus(self, make_ctx) -> None:
        ctx = make_ctx("if (items !== null) {\n  const v = items[0];\n}")
        outcome = correctness.risky_operations.evaluate(ctx)
        assert outcome.delta == 5
        assert outcome.tags == ("guards_present",)

    def test_unhandled_async(self, make_ctx) -> None:
        assert correctness.unhandled_async.evaluate(make_ctx("await load();")).delta == -5

    def test_handled_async(self, make_ctx) -> None:
        ctx = make_ctx("try {\n  await load();\n} catch (e) {}")
        assert correctness.unhandled_async.evaluate(ctx).delta == 0


# =============================================================================
# Metric
# =============================================================================


class TestCorrectnessMetric:
    """Six weighted sub-metrics."""

    def test_clean_change(self, make_ctx) -> None:
        result = ConfidenceScorer().evaluate_metric(correctness.METRIC, make_ctx("const total = 1;"))

        assert result.name is MetricName.CODE_CORRECTNESS
        assert result.score == 100
        assert [s.name for s in result.sub_metrics] == [
            "syntax",
            "type_safety",
            "static_bugs",
            "complexity",
            "style",
            "safety_guards",
        ]
        assert result.summary == "Excellent correctness - safe to commit"

    def test_weighted_sub_metrics(self, make_ctx) -> None:
        result = ConfidenceScorer().evaluate_metric(correctness.METRIC, make_ctx("eval(input);"))

        scores = {s.name: s.score for s in result.sub_metrics}
        assert scores["static_bugs"] == 60
        assert scores["safety_guards"] == 85
        # 25 + 20 + 15 + 15 + 10 + 4.25
        assert result.score == 89
        assert result.summary == "2 minor issue(s) found - review recommended"
