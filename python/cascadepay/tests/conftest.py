"""Shared fixtures: an in-memory ledger with a USDC-like mint and funded wallets."""

import pytest
from solders.keypair import Keypair

from cascadepay.client import CascadepayClient
from cascadepay.constants import LAMPORTS_PER_SOL, PROTOCOL_WALLET
from cascadepay.ledger import InMemoryLedger
from cascadepay.program import CascadepayProgram, Recipient
from cascadepay.utils import derive_ata

FIXED_TIME = 1_700_000_000
AUTHORITY_LAMPORTS = 10 * LAMPORTS_PER_SOL


@pytest.fixture
def ledger():
    return InMemoryLedger(clock=lambda: FIXED_TIME)


@pytest.fixture
def program(ledger):
    return CascadepayProgram(ledger)


@pytest.fixture
def mint_authority():
    return Keypair()


@pytest.fixture
def mint(ledger, mint_authority):
    return ledger.create_mint(mint_authority.pubkey(), decimals=6)


@pytest.fixture
def authority(ledger):
    kp = Keypair()
    ledger.airdrop(kp.pubkey(), AUTHORITY_LAMPORTS)
    return kp


@pytest.fixture
def alice():
    return Keypair()


@pytest.fixture
def bob():
    return Keypair()


@pytest.fixture
def alice_ata(ledger, mint, alice):
    return ledger.create_token_account(alice.pubkey(), mint)


@pytest.fixture
def bob_ata(ledger, mint, bob):
    return ledger.create_token_account(bob.pubkey(), mint)


@pytest.fixture
def protocol_ata(ledger, mint):
    return ledger.create_token_account(PROTOCOL_WALLET, mint)


@pytest.fixture
def client(program, authority):
    return CascadepayClient(program, authority)


@pytest.fixture
def even_recipients(alice, bob):
    return [Recipient(alice.pubkey(), 4950), Recipient(bob.pubkey(), 4950)]


@pytest.fixture
def split(client, mint, even_recipients, alice_ata, bob_ata):
    """A 50/50 (of 99%) split config between alice and bob."""
    return client.create_split_config(mint, even_recipients)


@pytest.fixture
def fund(ledger, mint, mint_authority):
    """Mint tokens into an owner's associated token account, creating it if needed."""

    def _fund(owner, amount):
        account = derive_ata(owner, mint)
        if not ledger.account_exists(account):
            ledger.create_token_account(owner, mint)
        ledger.mint_to(mint, account, amount, mint_authority.pubkey())
        return account

    return _fund


@pytest.fixture
def fund_vault(ledger, mint, mint_authority, client):
    """Send a payment straight into a split config's vault."""

    def _fund_vault(split_config, amount):
        vault = client.get_split_config(split_config).vault
        ledger.mint_to(mint, vault, amount, mint_authority.pubkey())
        return vault

    return _fund_vault
