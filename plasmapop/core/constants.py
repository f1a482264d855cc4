"""
Physical constants and engine defaults for plasmapop.

Level energies and ionization potentials are carried in eV, temperatures in K,
number densities in cm^-3 and mass densities in g cm^-3.
"""

# ============================================================================
# Fundamental Constants
# ============================================================================

# Boltzmann constant
KB_EV = 8.617333262e-5  # eV/K

# Hydrogen atom mass
M_H = 1.6735575e-24  # g

# ============================================================================
# Plasma Physics Constants
# ============================================================================

# Saha equation constant (pre-factor)
# n_{z+1} * n_e / n_z = 2 (2π m_e k_B T / h^2)^(3/2) * (U_{z+1} / U_z) * exp(-χ/kT)
# with T in eV, result in cm^-3
SAHA_CONST_CM3 = 6.042e21

# Hydrogen nuclei per gram for a solar H/He mixture (n_He / n_H = 0.1)
RHO2NH = 1.0 / (M_H * 1.4)

# ============================================================================
# Superlevel Approximation
# ============================================================================

# A level is considered LTE-coupled while its departure coefficient lies
# strictly inside (1/LTE_DEP_FRAC, LTE_DEP_FRAC)
LTE_DEP_FRAC = 2.0

# Minimum number of levels above ground kept out of the superlevel
LOWEST_SUPERLEVEL_THRESHOLD = 5
