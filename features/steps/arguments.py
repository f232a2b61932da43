import typing

from behave import use_step_matcher, when

from aptos_tokens.account_address import AccountAddress
from aptos_tokens.token_types import TokenId
from aptos_tokens.transactions import Encoder

# Use regular expressions
use_step_matcher("re")


@when(r"I encode as (?P<input_type>[a-zA-Z0-9]+)")
def when_encode(context: typing.Any, input_type: str):
    try:
        if input_type == "bool":
            context.output = Encoder.bool(context.input)
        elif input_type == "u64":
            context.output = Encoder.u64(context.input)
        elif input_type == "address":
            context.output = Encoder.address(context.input)
        elif input_type == "bytes":
            context.output = Encoder.bytes(context.input)
        elif input_type == "string":
            context.output = Encoder.str(context.input)
        else:
            raise Exception("Unrecognized input type")
    except (TypeError, ValueError) as e:
        context.output = e


@when(r"I use it as the creator of token (?P<name>\S+) in collection (?P<collection>\S+)")
def when_token_id_key(context: typing.Any, name: str, collection: str):
    assert isinstance(context.input, AccountAddress)
    context.output = TokenId(context.input, collection, name).to_dict()["creator"]
