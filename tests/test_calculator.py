from http import HTTPStatus

import pytest

from leafkit.calculator import (
    HELP,
    ArgCountError,
    ErrorQuit,
    ParseInt64Error,
    Response,
    UnexpectedMethodError,
    diagnostic_to_str,
    execute_command,
    handle_request,
    parse_int64,
    split_words,
)


def test_split_words_matches_whitespace_split():
    line = " \tsum  1\r\n2 3 \n"
    assert split_words(line) == line.split()


def test_split_words_empty():
    assert split_words(" \t\r\n") == []


def test_parse_int64_round_trip():
    for n in (0, -(2**63), 2**63 - 1, 12345):
        assert parse_int64(str(n)) == n


def test_parse_int64_plus_sign():
    assert parse_int64("+17") == 17


def test_parse_int64_trailing_garbage_location():
    with pytest.raises(ParseInt64Error) as info:
        parse_int64("2x3")
    word = "2x3"
    assert info.value.location() == f'"{word[:1]}"->"{word[1:]}"'


def test_parse_int64_leading_garbage_location():
    with pytest.raises(ParseInt64Error) as info:
        parse_int64("x3")
    assert info.value.location() == '->"x3"'


def test_parse_int64_overflow_rejected():
    with pytest.raises(ParseInt64Error) as info:
        parse_int64(str(2**63))
    assert info.value.position == 0


def test_location_at_end():
    err = ParseInt64Error("12", 2)
    assert err.location() == '"12"<-'


def test_arg_count_describe_forms():
    assert ArgCountError(1, 2, 2).describe() == "1 (required: 2)"
    assert ArgCountError(1, 2, None).describe() == "1 (required: [2, MAX])"
    assert ArgCountError(0, 1, 3).describe() == "0 (required: [1, 3])"


def test_empty_command_gives_help():
    assert execute_command("   ") == HELP


def test_unknown_command_gives_help():
    assert execute_command("pow 2 3") == HELP


def test_sum_example():
    assert execute_command("sum 0 1 2 3") == "6"


def test_sum_single_value_is_identity():
    assert execute_command("sum -42") == "-42"


def test_sub_matches_sum_of_negation():
    assert execute_command("sub 10 3 4") == execute_command("sum 10 -3 -4")


def test_mul_commutes():
    assert execute_command("mul 7 -3 5") == execute_command("mul 5 7 -3")


def test_div_truncates_toward_zero():
    assert execute_command("div -7 2") == "-3"


def test_mod_sign_follows_dividend():
    assert execute_command("mod -7 2") == "-1"


def test_div_mod_identity():
    a, b = -29, 4
    q = int(execute_command(f"div {a} {b}"))
    r = int(execute_command(f"mod {a} {b}"))
    assert q * b + r == a


def test_sub_needs_two_arguments():
    with pytest.raises(ArgCountError) as info:
        execute_command("sub 1")
    assert info.value.command == "sub"
    assert info.value.status == HTTPStatus.BAD_REQUEST
    assert info.value.maximum is None


def test_mod_needs_exactly_two():
    with pytest.raises(ArgCountError) as info:
        execute_command("mod 1")
    assert info.value.describe() == "1 (required: 2)"


def test_division_by_zero():
    with pytest.raises(ArithmeticError, match="division by zero"):
        execute_command("div 1 0")
    with pytest.raises(ArithmeticError, match="division by zero"):
        execute_command("mod 1 0")


def test_parse_error_tagged_with_command():
    with pytest.raises(ParseInt64Error) as info:
        execute_command("mul 1 2x3")
    assert info.value.command == "mul"
    assert info.value.word == "2x3"


def test_error_quit_raises():
    with pytest.raises(ErrorQuit):
        execute_command("error-quit")


def test_diagnostic_to_str_indents():
    text = diagnostic_to_str("a\nb")
    assert text == "\nDetailed error diagnostic:\n----\na\n    b\n----"


def test_handle_request_ok():
    response = handle_request("POST", "sum 0 1 2 3", True)
    assert response.status == HTTPStatus.OK
    assert response.body == "6\n"
    assert response.headers["Content-Type"] == "text/plain"
    assert response.headers["Content-Length"] == str(len(response.body))
    assert not response.need_eof


def test_handle_request_wrong_method():
    response = handle_request("DELETE", "", True)
    assert response.status == HTTPStatus.BAD_REQUEST
    assert response.body.startswith("Error: unexpected HTTP method. Expected: POST")
    assert "Detailed error diagnostic:" in response.body


def test_handle_request_parse_error():
    response = handle_request("POST", "mul 1 2x3", False)
    assert response.status == HTTPStatus.BAD_REQUEST
    assert response.body.startswith('Error (mul): int64 parse error: "2"->"x3"')
    assert response.need_eof


def test_handle_request_division_by_zero():
    response = handle_request("POST", "div 1 0")
    assert response.status == HTTPStatus.BAD_REQUEST
    assert response.body.startswith("Error (div): division by zero")
    assert response.body.endswith("----\n")


def test_handle_request_arg_count():
    response = handle_request("POST", "mod 1")
    assert response.body.startswith("Error (mod): wrong argument count: 1 (required: 2)")


def test_handle_request_error_quit_raises():
    with pytest.raises(RuntimeError, match="error_quit"):
        handle_request("POST", "error-quit")


def test_unexpected_method_error_text():
    assert str(UnexpectedMethodError("POST")) == "unexpected HTTP method. Expected: POST"


def test_response_connection_header():
    response = Response(HTTPStatus.OK, "x\n", keep_alive=False)
    assert response.headers["Connection"] == "close"
    assert response.need_eof