from tests.conftest import DEPLOYER, TOKEN_SUPPLY
from tokenops.diagnostics import ContractState, ReferenceLinks, format_reference_report, read_state
from tokenops.utils import explorer_base_url

PROXY = "0x" + "9" * 40
IMPLEMENTATION = "0x" + "8" * 40


def test_read_token_state(framework, token_profile):
    deployed = framework.deploy_proxy("TestTokenV2", ["testToken", "MTK", DEPLOYER, DEPLOYER])
    state = read_state(deployed.instance, token_profile)

    assert state.name == "testToken"
    assert state.owner == DEPLOYER
    assert state.supply == TOKEN_SUPPLY
    assert state.decimals == 18
    assert state.version == "2.0.0"
    assert state.base_uri is None
    assert state.errors == dict()
    assert "\tTotalSupply      : 1000000" in state.lines(supply_label="TotalSupply")


def test_read_state_isolates_failing_calls(framework, nft_profile):
    deployed = framework.deploy_proxy("TestNft", ["TestNFT", "TNFT", "ipfs://base/", DEPLOYER])
    # the V1 collection has neither version() nor baseURI()
    state = read_state(deployed.instance, nft_profile)

    assert state.name == "TestNFT"
    assert state.supply == 0
    assert state.decimals is None
    assert state.version is None
    assert state.base_uri is None
    assert set(state.errors) == {"version", "base_uri"}
    assert "\tVersion" not in "\n".join(state.lines())


def test_formatted_supply():
    assert ContractState(supply=1500 * 10**15, decimals=18).formatted_supply() == "1.5"
    assert ContractState(supply=7).formatted_supply() == "7"
    assert ContractState().formatted_supply() == "(unavailable)"


def test_explorer_base_url():
    assert explorer_base_url("sepolia") == "https://sepolia.etherscan.io"
    assert explorer_base_url("mainnet") == "https://etherscan.io"
    assert explorer_base_url("local") is None


def test_reference_report():
    links = ReferenceLinks(
        explorer_url="https://sepolia.etherscan.io/",
        proxy_address=PROXY,
        implementation_address=IMPLEMENTATION,
        deployer_address=DEPLOYER,
        name="Renamed",
        symbol="RNM",
        version="2.0.0",
        previous_name="testToken",
        previous_symbol="MTK",
        upgrade_tx="0xabc",
        upgrade_block=1234,
    )
    sections = {section.title: section.lines for section in format_reference_report(links)}

    assert sections["STEP 3: Update token information"][0] == (
        f"https://sepolia.etherscan.io/token/{PROXY}"
    )
    assert "name() should return: Renamed" in sections["Verify on-chain data"]
    form = sections["Information to submit in update form"]
    assert f"Deployer Address: {DEPLOYER}" in form
    assert "Upgrade Transaction: 0xabc (block 1234)" in form
    assert any("previous: testToken (MTK)" in line for line in form)
    assert "Upgrade Tx     : https://sepolia.etherscan.io/tx/0xabc" in sections["Useful links"]


def test_reference_report_without_upgrade_details():
    links = ReferenceLinks(
        explorer_url="https://etherscan.io",
        proxy_address=PROXY,
        implementation_address=IMPLEMENTATION,
        deployer_address=DEPLOYER,
        name="testToken",
        symbol="MTK",
        version="1.0.0",
    )
    report = format_reference_report(links)
    text = "\n".join(line for section in report for line in section.lines)

    assert [section.title for section in report][:2] == [
        "STEP 1: Login/Register explorer account",
        "STEP 2: Verify address ownership (one-time only)",
    ]
    assert "Upgrade" not in text
    assert f"https://etherscan.io/address/{IMPLEMENTATION}" in text
