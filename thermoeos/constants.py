"""Physical constants used by the models."""

R_GAS = 8.31446261815324  # gas constant, J mol^-1 K^-1
N_A = 6.02214076e23  # Avogadro's number, mol^-1
K_B = 1.380649e-23  # Boltzmann constant, J K^-1
