"""
Physical constants and relativistic helpers for PASIM.

All values are CODATA 2018 in SI units. Energies are in joules unless a
function name says otherwise.
"""

import math

pi = math.pi
two_pi = 2.0 * math.pi

# === Fundamental constants ===

c = 299792458.0                       # speed of light [m/s]
c_squared = c * c
e = 1.602176634e-19                   # elementary charge [C]
m_e = 9.1093837015e-31                # electron mass [kg]
m_p = 1.67262192369e-27               # proton mass [kg]
m_n = 1.67492749804e-27               # neutron mass [kg]
u = 1.66053906660e-27                 # atomic mass unit [kg]
epsilon_0 = 8.8541878128e-12          # vacuum permittivity [F/m]
mu_0 = 1.25663706212e-6               # vacuum permeability [H/m]
h = 6.62607015e-34                    # Planck constant [J s]
hbar = h / two_pi
k_B = 1.380649e-23                    # Boltzmann constant [J/K]
N_A = 6.02214076e23                   # Avogadro constant [1/mol]
alpha = 7.2973525693e-3               # fine-structure constant
r_e = 2.8179403262e-15                # classical electron radius [m]
a_0 = 5.29177210903e-11               # Bohr radius [m]

# === Energy units (in joules) ===

eV = e
keV = 1e3 * eV
MeV = 1e6 * eV
GeV = 1e9 * eV
TeV = 1e12 * eV


def joules_to_ev(energy: float) -> float:
    return energy / eV


def ev_to_joules(energy_ev: float) -> float:
    return energy_ev * eV


electron_rest_energy = m_e * c_squared
proton_rest_energy = m_p * c_squared


# === Relativistic helpers ===

def gamma_from_velocity(v: float) -> float:
    """Lorentz factor for a speed ``v`` in m/s."""
    beta = v / c
    return 1.0 / math.sqrt(1.0 - beta * beta)


def gamma_from_beta(beta: float) -> float:
    return 1.0 / math.sqrt(1.0 - beta * beta)


def beta_from_gamma(gamma: float) -> float:
    """Return v/c for a Lorentz factor; zero for gamma <= 1."""
    if gamma <= 1.0:
        return 0.0
    return math.sqrt(1.0 - 1.0 / (gamma * gamma))


def gamma_from_kinetic_energy(kinetic_energy: float, mass: float) -> float:
    return 1.0 + kinetic_energy / (mass * c_squared)


def gamma_from_momentum(momentum: float, mass: float) -> float:
    pmc = momentum / (mass * c)
    return math.sqrt(1.0 + pmc * pmc)


def kinetic_energy_from_gamma(gamma: float, mass: float) -> float:
    return (gamma - 1.0) * mass * c_squared


def total_energy_from_gamma(gamma: float, mass: float) -> float:
    return gamma * mass * c_squared


def momentum_from_gamma(gamma: float, mass: float) -> float:
    """Momentum magnitude gamma*beta*m*c."""
    return gamma * beta_from_gamma(gamma) * mass * c
