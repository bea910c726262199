import logging

from logging_config import AddressAnonymizingFilter, anonymize_address

from conftest import TEST_ADDRESS


def _record(msg, args=None):
    return logging.LogRecord("services.controller", logging.INFO, __file__, 1, msg, args, None)


def test_addresses_in_messages_are_hashed():
    record = _record(f"Airdrop #1 claimed by {TEST_ADDRESS}")

    assert AddressAnonymizingFilter().filter(record) is True
    assert TEST_ADDRESS not in record.getMessage()
    assert anonymize_address(TEST_ADDRESS) in record.getMessage()


def test_addresses_in_arguments_are_hashed():
    evm = "0x" + "ab" * 20
    record = _record("Eligibility check for %s", (evm,))

    AddressAnonymizingFilter().filter(record)
    assert record.getMessage() == f"Eligibility check for {anonymize_address(evm)}"


def test_hash_is_stable_and_short():
    assert anonymize_address(TEST_ADDRESS) == anonymize_address(TEST_ADDRESS)
    assert anonymize_address(TEST_ADDRESS).startswith("wallet-")
    assert len(anonymize_address(TEST_ADDRESS)) == len("wallet-") + 12


def test_other_text_is_untouched():
    record = _record("Persisted 3 airdrop records (version 4)")
    AddressAnonymizingFilter().filter(record)
    assert record.getMessage() == "Persisted 3 airdrop records (version 4)"
