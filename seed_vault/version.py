"""Seed Vault Meta information.
   Seed Vault protects a wallet recovery phrase at rest with a passphrase.
"""
__title__ = 'seed_vault'
__description__ = (
   'Seed Vault protects a wallet recovery phrase at rest using '
   'scrypt, HKDF and AES-GCM.'
)
__version__ = '0.3.0'
__author__ = 'HiHODL Engineering'
__license__ = 'Apache-2.0'
