"""
密码工具：bcrypt 哈希 + 兼容明文记录的比对
"""

import re

import bcrypt

# 完整的 bcrypt 哈希：$2a$/$2b$/$2y$ + 两位 cost + 53 位盐与摘要
_BCRYPT_HASH = re.compile(r"^\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}$")


def hash_password(password: str) -> str:
    """生成密码哈希"""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def is_hashed(stored: str) -> bool:
    return bool(_BCRYPT_HASH.match(stored))


def password_matches(stored: str | None, given: str) -> bool:
    """
    校验密码。

    远端记录可能是注册时写入的 bcrypt 哈希，也可能是直接写进存储的明文；
    明文按大小写敏感的精确比较处理，即便它恰好以 $2b$ 之类开头。
    记录缺少密码时一律不匹配。
    """
    if stored is None:
        return False
    if is_hashed(stored):
        try:
            return bcrypt.checkpw(given.encode(), stored.encode())
        except ValueError:
            return False
    return stored == given
