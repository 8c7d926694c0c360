"""
ACT conversion and percentile tables.

Each conversion table is an ordered tuple of (raw_threshold, scaled_score)
pairs read as a step function: a raw score maps to the scaled score of the
largest threshold not above it. Stored percentiles depend on these exact
pairs, so edit them only together with a data migration.
"""

ENGLISH_CONVERSION_TABLE = (
    (0, 1), (1, 1), (2, 1), (3, 1), (4, 1), (5, 1), (6, 1), (7, 1), (8, 1), (9, 2),
    (10, 2), (11, 3), (12, 3), (13, 4), (14, 4), (15, 5), (16, 5), (17, 6), (18, 6), (19, 7),
    (20, 7), (21, 8), (22, 8), (23, 9), (24, 9), (25, 10), (26, 10), (27, 11), (28, 11), (29, 12),
    (30, 12), (31, 13), (32, 13), (33, 14), (34, 14), (35, 15), (36, 15), (37, 16), (38, 16), (39, 17),
    (40, 17), (41, 18), (42, 18), (43, 19), (44, 19), (45, 20), (46, 20), (47, 21), (48, 21), (49, 22),
    (50, 22), (51, 23), (52, 23), (53, 24), (54, 24), (55, 25), (56, 26), (57, 26), (58, 27), (59, 27),
    (60, 28), (61, 29), (62, 29), (63, 30), (64, 30), (65, 31), (66, 32), (67, 32), (68, 33), (69, 33),
    (70, 34), (71, 34), (72, 35), (73, 35), (74, 36), (75, 36),
)

MATH_CONVERSION_TABLE = (
    (0, 1), (1, 1), (2, 1), (3, 1), (4, 1), (5, 1), (6, 1), (7, 1), (8, 1), (9, 1),
    (10, 1), (11, 1), (12, 1), (13, 1), (14, 1), (15, 1), (16, 1), (17, 1), (18, 1), (19, 1),
    (20, 1), (21, 1), (22, 1), (23, 1), (24, 1), (25, 1), (26, 2), (27, 3), (28, 4), (29, 5),
    (30, 6), (31, 7), (32, 8), (33, 9), (34, 10), (35, 11), (36, 12), (37, 13), (38, 14), (39, 15),
    (40, 16), (41, 17), (42, 18), (43, 19), (44, 20), (45, 21), (46, 22), (47, 23), (48, 24), (49, 25),
    (50, 26), (51, 27), (52, 28), (53, 29), (54, 30), (55, 31), (56, 32), (57, 33), (58, 34), (59, 35),
    (60, 36),
)

READING_CONVERSION_TABLE = (
    (0, 1), (1, 1), (2, 1), (3, 1), (4, 1), (5, 1), (6, 2), (7, 3), (8, 4), (9, 5),
    (10, 6), (11, 7), (12, 8), (13, 9), (14, 10), (15, 11), (16, 12), (17, 13), (18, 14), (19, 15),
    (20, 16), (21, 17), (22, 18), (23, 19), (24, 20), (25, 21), (26, 22), (27, 23), (28, 24), (29, 25),
    (30, 26), (31, 27), (32, 28), (33, 29), (34, 30), (35, 31), (36, 32), (37, 33), (38, 34), (39, 35),
    (40, 36),
)

SCIENCE_CONVERSION_TABLE = (
    (0, 1), (1, 1), (2, 1), (3, 1), (4, 1), (5, 1), (6, 2), (7, 3), (8, 4), (9, 5),
    (10, 6), (11, 7), (12, 8), (13, 9), (14, 10), (15, 11), (16, 12), (17, 13), (18, 14), (19, 15),
    (20, 16), (21, 17), (22, 18), (23, 19), (24, 20), (25, 21), (26, 22), (27, 23), (28, 24), (29, 25),
    (30, 26), (31, 27), (32, 28), (33, 29), (34, 30), (35, 31), (36, 32), (37, 33), (38, 34), (39, 35),
    (40, 36),
)

# (scaled_score, national percentile)
PERCENTILE_TABLE = (
    (1, 1), (2, 1), (3, 1), (4, 1), (5, 1), (6, 1), (7, 1), (8, 1), (9, 2), (10, 3),
    (11, 5), (12, 7), (13, 9), (14, 12), (15, 16), (16, 20), (17, 25), (18, 30), (19, 36), (20, 42),
    (21, 48), (22, 55), (23, 61), (24, 67), (25, 73), (26, 78), (27, 83), (28, 87), (29, 90), (30, 93),
    (31, 95), (32, 97), (33, 98), (34, 99), (35, 99), (36, 100),
)

CONVERSION_TABLES = {
    "english": ENGLISH_CONVERSION_TABLE,
    "math": MATH_CONVERSION_TABLE,
    "reading": READING_CONVERSION_TABLE,
    "science": SCIENCE_CONVERSION_TABLE,
}

# Questions per full ACT section
SECTION_TOTALS = {
    "english": 75,
    "math": 60,
    "reading": 40,
    "science": 40,
}

MIN_SCALED_SCORE = 1
MIN_PERCENTILE = 1
