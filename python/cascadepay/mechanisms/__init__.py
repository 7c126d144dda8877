"""x402 payment mechanisms built on cascadepay."""
