"""Constants for Solana (SVM) split scheme."""

# Scheme identifier
SCHEME_SPLIT = "split"

# Default timeout for split payments (in seconds)
DEFAULT_TIMEOUT_SECONDS = 300

# Error codes
# Payload validation
ERR_UNSUPPORTED_SCHEME = "unsupported_scheme"
ERR_NETWORK_MISMATCH = "invalid_split_svm_network_mismatch"
ERR_INVALID_PAYLOAD = "invalid_split_svm_payload"
ERR_INVALID_SIGNATURE = "invalid_split_svm_signature"
ERR_AUTHORIZATION_EXPIRED = "invalid_split_svm_authorization_expired"
ERR_NONCE_ALREADY_USED = "invalid_split_svm_nonce_already_used"

# Destination validation
ERR_NOT_SPLIT_VAULT = "invalid_split_svm_destination_not_split_vault"
ERR_SPLIT_CONFIG_MISMATCH = "invalid_split_svm_config_mismatch"
ERR_MINT_MISMATCH = "invalid_split_svm_mint_mismatch"
ERR_RECIPIENT_MISMATCH = "invalid_split_svm_recipient_mismatch"

# Amounts
ERR_AMOUNT_INSUFFICIENT = "invalid_split_svm_amount_insufficient"
ERR_INSUFFICIENT_BALANCE = "invalid_split_svm_insufficient_balance"

# Settlement
ERR_PROTOCOL_ATA_MISSING = "split_svm_protocol_ata_missing"
ERR_SETTLEMENT_FAILED = "split_svm_settlement_failed"
