"""Tests for the Ruby DSL reader."""

import pytest

from manifestdoc.errors import SourceParseError
from manifestdoc.extractors import extract
from manifestdoc.nodes import NodeKind
from manifestdoc.parsers.ruby import Expr, Symbol, read_ruby, to_text

from conftest import RUBY_SOURCE


def _chain(source):
    return read_ruby(source)[0].statement.chain


def _heads(source):
    """First call name of every top-level statement."""
    return [n.statement.chain.names()[0] for n in read_ruby(source)]


class TestLiterals:
    """Argument values read from literal nodes."""

    def test_strings(self):
        assert _chain("desc 'single'\n").last.args == ["single"]
        assert _chain('desc "double\\n"\n').last.args == ["double\n"]

    def test_single_quoted_keeps_backslashes(self):
        chain = _chain("newvalues('\\A\\d+\\Z', 'it\\'s')\n")
        assert chain.last.args == ["\\A\\d+\\Z", "it's"]

    def test_interpolation_kept_as_written(self):
        assert _chain('desc "Runs #{cmd} twice."\n').last.args == ["Runs #{cmd} twice."]

    def test_symbols_and_labels(self):
        call = _chain("confine kernel: 'Linux', :osfamily => :redhat\n").last
        assert call.kwargs == {"kernel": "Linux", "osfamily": "redhat"}
        assert isinstance(call.kwargs["osfamily"], Symbol)

    def test_quoted_symbol(self):
        arg = _chain("create_function(:'mymod::add')\n").last.args[0]
        assert arg == "mymod::add"
        assert isinstance(arg, Symbol)

    def test_heredoc(self):
        source = "desc <<-EOT\n  Some text.\n  More.\n  EOT\nnext_call\n"
        nodes = read_ruby(source)
        assert nodes[0].statement.chain.last.args == ["  Some text.\n  More."]
        assert nodes[1].statement.chain.names() == ["next_call"]
        assert nodes[1].line == 5

    def test_squiggly_heredoc_dedents(self):
        chain = _chain("desc <<~EOT\n    Some text.\n      Indented.\nEOT\n")
        assert chain.last.args == ["Some text.\n  Indented."]

    def test_heredoc_as_keyword_argument(self):
        source = "register(\n  desc: <<-EOS,\n    Text.\n  EOS\n  name: 'x',\n)\n"
        call = _chain(source).last
        assert call.kwargs == {"desc": "    Text.", "name": "x"}

    def test_two_heredocs_on_one_line(self):
        source = "pair(<<-A, <<-B)\n  first\n  A\n  second\n  B\n"
        assert _chain(source).last.args == ["  first", "  second"]

    def test_percent_words(self):
        call = _chain("feature :f, 'F.', methods: %w[encrypt decrypt]\n").last
        assert call.kwargs["methods"] == ["encrypt", "decrypt"]

    def test_regex_is_expression(self):
        arg = _chain("newvalues(/^\\d+$/)\n").last.args[0]
        assert isinstance(arg, Expr)
        assert arg == "/^\\d+$/"

    def test_hash_and_list_literals(self):
        call = _chain(
            "register(name: 'x', attributes: { a: { type: 'String' } }, list: [1, -2, nil])\n"
        ).last
        assert call.kwargs["attributes"] == {"a": {"type": "String"}}
        assert call.kwargs["list"] == [1, -2, None]

    def test_non_literal_argument_is_expression(self):
        chain = _chain("newparam(:encrypt, :parent => Puppet::Parameter::Boolean)\n")
        parent = chain.last.kwargs["parent"]
        assert isinstance(parent, Expr)
        assert parent == "Puppet::Parameter::Boolean"

    def test_adjacent_string_literals_concatenate(self):
        assert _chain("desc 'one ' \\\n  'two'\n").last.args == ["one two"]

    def test_comments_inside_hash_ignored(self):
        source = "register(\n  a: {\n    # note\n    b: 1, # trailing\n  },\n)\n"
        assert _chain(source).last.kwargs == {"a": {"b": 1}}


class TestChains:
    """Call chains and the blocks attached to them."""

    def test_paren_args(self):
        chain = _chain("Puppet::Functions.create_function(:func4x) do\nend\n")
        assert chain.names() == ["Puppet::Functions", "create_function"]
        assert chain.calls[0].receiver_only
        assert chain.calls[1].args == ["func4x"]
        assert chain.block is not None

    def test_command_args(self):
        chain = _chain("Puppet::Type.type(:database).provide :linux do\nend\n")
        assert chain.names() == ["Puppet::Type", "type", "provide"]
        assert chain.last.args == ["linux"]

    def test_keyword_arguments(self):
        call = _chain("defaultfor :osfamily => 'RedHat', release: '7'\n").last
        assert call.args == []
        assert call.kwargs == {"osfamily": "RedHat", "release": "7"}

    def test_multiline_call_continues_after_comma(self):
        call = _chain("commands foo: '/usr/bin/foo',\n  bar: '/usr/bin/bar'\n").last
        assert call.kwargs == {"foo": "/usr/bin/foo", "bar": "/usr/bin/bar"}

    def test_bare_identifier_is_a_call(self):
        chain = _chain("isnamevar\n")
        assert chain.names() == ["isnamevar"]
        assert chain.block is None

    def test_other_statements_have_empty_chain(self):
        assert _chain("FOO = 1\n").calls == []

    def test_block_body_statements(self):
        stmt = read_ruby(
            "newtype(:x) do\n"
            "  # The name.\n"
            "  newparam(:name) do\n"
            "    isnamevar\n"
            "  end\n"
            "\n"
            "  feature :f, 'F.'\n"
            "end\n"
        )[0].statement
        body = stmt.body()
        assert [s.chain.names() for s in body] == [["newparam"], ["feature"]]
        assert body[0].comment == "The name."
        assert [s.chain.names() for s in body[0].body()] == [["isnamevar"]]

    def test_brace_block_body(self):
        stmt = read_ruby("defaultto { compute(:x) }\n")[0].statement
        assert stmt.chain.last.args == []
        assert [s.chain.names() for s in stmt.body()] == [["compute"]]


class TestStatements:
    """Splitting a file into statements with their comments."""

    def test_sample_module(self):
        nodes = read_ruby(RUBY_SOURCE, "sample.rb")
        assert len(nodes) == 5
        assert all(n.kind == NodeKind.RUBY for n in nodes)
        assert nodes[0].comment == "An example 4.x function."
        assert nodes[0].file == "sample.rb"
        assert nodes[0].line == 3
        # the provider has no comment of its own
        assert nodes[2].comment == ""

    def test_blank_line_drops_comment(self):
        assert read_ruby("# License header.\n\nfoo :a\n")[0].comment == ""

    def test_trailing_comment_is_not_leading(self):
        nodes = read_ruby("foo :a # about foo\nbar :b\n")
        assert nodes[1].comment == ""

    def test_block_comment_and_end_marker(self):
        source = "=begin\nignored\n=end\nfoo :a\n__END__\nbar :b\n"
        nodes = read_ruby(source)
        assert len(nodes) == 1
        assert nodes[0].statement.chain.names() == ["foo"]
        assert nodes[0].comment == ""

    def test_semicolons_separate_statements(self):
        nodes = read_ruby("# First.\nfoo :a; bar :b\n")
        assert [n.statement.chain.names() for n in nodes] == [["foo"], ["bar"]]
        assert [n.comment for n in nodes] == ["First.", ""]

    def test_nested_control_flow_does_not_end_block(self):
        source = (
            "Puppet::Functions.create_function(:f) do\n"
            "  def f(x)\n"
            "    if x\n"
            "      x.each { |y| y }\n"
            "    end\n"
            "    return 1 unless x\n"
            "    while x do\n"
            "      x -= 1\n"
            "    end\n"
            "  end\n"
            "end\n"
            "other :call\n"
        )
        assert _heads(source) == ["Puppet::Functions", "other"]

    def test_modifier_conditionals(self):
        source = (
            "Puppet::Functions.create_function(:f) do\n"
            "  def f(x)\n"
            "    x = 1 if x.nil?\n"
            "    x += 1 while x < 3\n"
            "    return unless x\n"
            "    return if x.zero?\n"
            "    x\n"
            "  end\n"
            "end\n"
            "other :call\n"
        )
        assert _heads(source) == ["Puppet::Functions", "other"]

    def test_begin_end_while(self):
        source = (
            "Puppet::Functions.create_function(:f) do\n"
            "  def f(x)\n"
            "    begin\n"
            "      x -= 1\n"
            "    end while x > 0\n"
            "    x\n"
            "  end\n"
            "end\n"
            "other :call\n"
        )
        assert _heads(source) == ["Puppet::Functions", "other"]

    def test_guard_clause_keeps_function(self):
        """A `return if` guard does not hide the rest of the file."""
        source = (
            "Puppet::Functions.create_function(:guarded) do\n"
            "  # @param value The value.\n"
            "  dispatch :guarded do\n"
            "    param 'Any', :value\n"
            "  end\n"
            "\n"
            "  def guarded(value)\n"
            "    return if value.nil?\n"
            "    value\n"
            "  end\n"
            "end\n"
        )
        nodes = read_ruby(source, "guarded.rb")
        assert len(nodes) == 1
        func = extract(nodes[0])
        assert func.name == "guarded"
        assert [p.name for p in func.overloads[0].parameters] == ["value"]

    def test_method_signature(self):
        stmt = read_ruby("def add(a, b = 2, *rest, key: 1, &blk)\nend\n")[0].statement
        name, params = stmt.signature()
        assert name == "add"
        assert [(p.name, p.default, p.splat, p.block) for p in params] == [
            ("a", None, False, False),
            ("b", "2", False, False),
            ("rest", None, True, False),
            ("key", "1", False, False),
            ("blk", None, False, True),
        ]
        assert read_ruby("foo :a\n")[0].statement.signature() is None


class TestErrors:
    """Sources the grammar rejects."""

    def test_unclosed_block(self):
        with pytest.raises(SourceParseError) as exc:
            read_ruby("foo do\n  bar\n", "bad.rb")
        assert exc.value.file == "bad.rb"

    def test_unexpected_end(self):
        with pytest.raises(SourceParseError):
            read_ruby("foo\nend\n")

    def test_unterminated_string(self):
        with pytest.raises(SourceParseError):
            read_ruby("desc 'oops\n")

    def test_unterminated_heredoc(self):
        with pytest.raises(SourceParseError) as exc:
            read_ruby("desc <<-EOT\nno end\n", "bad.rb")
        assert exc.value.file == "bad.rb"


def test_to_text():
    assert to_text(None) is None
    assert to_text(True) == "true"
    assert to_text(False) == "false"
    assert to_text(Symbol("up")) == "up"
    assert to_text([Symbol("a"), "b"]) == "[a, b]"
    assert to_text({"k": 1}) == "{k => 1}"
    assert to_text(3) == "3"
