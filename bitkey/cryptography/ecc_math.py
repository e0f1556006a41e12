"""
Helper functions for the mathematics of elliptic curves
"""

__all__ = ["is_quadratic_residue", "sqrt_mod_p"]


def is_quadratic_residue(n: int, p: int) -> bool:
    """
    Euler's criterion. Returns True if (n|p) != -1 (0 counts as a residue).
    """
    n = n % p
    if n == 0:
        return True
    return pow(n, (p - 1) >> 1, p) == 1


def sqrt_mod_p(n: int, p: int) -> int:
    """
    Assuming n is a quadratic residue mod p, we return an integer r such that r^2 = n (mod p).
    Uses the p = 3 (mod 4) shortcut where possible, otherwise Tonelli-Shanks.
    """
    n = n % p
    if n == 0:
        return 0

    if not is_quadratic_residue(n, p):
        raise ValueError("Square root requested for quadratic non-residue")

    # secp256k1 prime is 3 mod 4
    if p & 3 == 3:
        return pow(n, (p + 1) >> 2, p)

    # --- GENERAL CASE --- #
    # p - 1 = 2^s * q with q odd
    q, s = p - 1, 0
    while (q & 1) == 0:
        s += 1
        q >>= 1

    z = 2
    while is_quadratic_residue(z, p):
        z += 1

    m, c, t, r = s, pow(z, q, p), pow(n, q, p), pow(n, (q + 1) >> 1, p)
    while t != 1:
        # least i with t^(2^i) = 1
        i, temp = 1, (t * t) % p
        while temp != 1:
            i += 1
            temp = (temp * temp) % p

        b = pow(c, 1 << (m - i - 1), p)
        m, c = i, (b * b) % p
        t, r = (t * c) % p, (r * b) % p

    return r
