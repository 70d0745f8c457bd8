'''
Command line tests
'''

from comp.cli import CLI

from pytest import mark, raises


def run(*args):
    CLI().run(args=list(args))


def test_tokens(capsys):
    run('3', '4', '+')
    assert capsys.readouterr().out == '7\n'


def test_tokens_split_on_whitespace(capsys):
    run('fn sq dup x end', '5', 'sq', '2.5')
    assert capsys.readouterr().out == '25\n2.5\n'


def test_negative_literal(capsys):
    run('-3', 'abs', '1', '2', '/')
    assert capsys.readouterr().out == '3\n0.5\n'


def test_file(capsys, tmp_path):
    program = tmp_path / 'program.comp'
    program.write_text('( squares )\nfn sq dup x end\n3 sq\n4 sq\n+\n')
    run('-f', str(program))
    assert capsys.readouterr().out == '25\n'


def test_file_and_tokens_exclusive(tmp_path):
    program = tmp_path / 'program.comp'
    program.write_text('1')
    with raises(SystemExit) as info:
        run('-f', str(program), '2')
    assert info.value.code == 2


def test_precision(capsys):
    run('-k', '3', '1', '3', '/')
    assert capsys.readouterr().out == '0.333\n'


def test_underflow_exits(capsys):
    with raises(SystemExit) as info:
        run('1', '+')
    assert info.value.code == CLI.EXIT_FAILURE == 99
    captured = capsys.readouterr()
    assert captured.out == ''
    assert "'+' needs at least 2 element(s) on stack" in captured.err


def test_parse_failure_exits(capsys):
    with raises(SystemExit) as info:
        run('1', 'bogus')
    assert info.value.code == 99
    assert "Cannot parse 'bogus' as number" in capsys.readouterr().err


def test_verbose_traceback(capsys):
    with raises(SystemExit):
        run('-v', 'sqrt')
    assert 'Traceback' in capsys.readouterr().err


def test_drop_warning(capsys):
    run('drop', 'drop', '1')
    captured = capsys.readouterr()
    assert captured.out == '1\n'
    assert captured.err == 'warning: Nothing on stack to drop\n' * 2


def test_dump(capsys):
    run('-D', 'fn', '1', 'proot', 'zzz')
    assert capsys.readouterr().out.splitlines() == [
        '<class>\t<repr(token)>\t<depth>',
        "command\t'fn'\t0",
        "number\t'1'\tNone",
        "command\t'proot'\t3",
        "invalid\t'zzz'\tNone",
    ]


def test_raw_grammar(capsys):
    run('-G')
    assert 'inf(?:inity)?' in capsys.readouterr().out


def test_version(capsys):
    with raises(SystemExit) as info:
        run('-V')
    assert info.value.code == 0
    assert capsys.readouterr().out.startswith('comp ')


@mark.parametrize('args, out', [
    (['-1e5', 'abs'], '100000\n'),
    (['-inf', 'abs'], 'inf\n'),
    (['-Infinity'], '-inf\n'),
    (['2', '-1e1', 'x'], '-20\n'),
    (['-k', '2', '-1.5e-1'], '-0.15\n'),
])
def test_negative_literals(capsys, args, out):
    run(*args)
    assert capsys.readouterr().out == out


def test_negative_literal_dump(capsys):
    run('-D', '-inf')
    assert capsys.readouterr().out.splitlines()[1] == "number\t'-inf'\tNone"


def test_overflow_not_fatal(capsys):
    run('10', '400', '^')
    assert capsys.readouterr().out == 'inf\n'
