import click
from eth_utils import to_checksum_address


class NetworkList(click.ParamType):
    name = "networks"

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value
        networks = tuple(n.strip() for n in value.split(",") if n.strip())
        if not networks:
            self.fail(f"'{value}' does not name any network", param, ctx)
        return networks


class ChecksumAddress(click.ParamType):
    name = "checksum_address"

    def convert(self, value, param, ctx):
        try:
            value = to_checksum_address(value=value)
        except ValueError:
            self.fail("Invalid ethereum address", param, ctx)
        else:
            return value
