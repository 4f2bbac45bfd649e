"""
Genetic search over (course, room, shift, lecturer) tuples.

Setiap individu adalah satu kandidat jadwal. Fitness dihitung relatif terhadap seluruh
populasi pada generasi yang sama: mulai dari 100, dikurangi 20 untuk setiap individu lain
yang memakai ruangan, dosen, atau mata kuliah yang sama pada shift yang sama.
"""
import random

import numpy
from deap import base, creator, tools

from .config import SchedulingConfig
from .eligibility import lecturer_is_eligible
from .errors import InvalidArgument
from .logger import setup_logger

logger = setup_logger(__name__)

COURSE, ROOM, SHIFT, LECTURER = range(4)
GENES = 4

PERFECT_FITNESS = 100
CONFLICT_PENALTY = 20

# ------------------------------
# DEAP GENETIC ALGORITHM SETUP
# ------------------------------

if "JadwalFitness" not in creator.__dict__:
    creator.create("JadwalFitness", base.Fitness, weights=(1.0,))
if "JadwalIndividual" not in creator.__dict__:
    creator.create("JadwalIndividual", list, fitness=creator.JadwalFitness)


def score_population(population):
    """Return the fitness of every individual against the rest of its generation."""
    scores = []
    for i, individual in enumerate(population):
        fitness = PERFECT_FITNESS
        for j, other in enumerate(population):
            if i == j or other[SHIFT] != individual[SHIFT]:
                continue
            if other[ROOM] == individual[ROOM]:
                fitness -= CONFLICT_PENALTY
            if other[LECTURER] == individual[LECTURER]:
                fitness -= CONFLICT_PENALTY
            if other[COURSE] == individual[COURSE]:
                fitness -= CONFLICT_PENALTY
        scores.append(max(0, fitness))
    return scores


def fitness_of(individual):
    return individual.fitness.values[0] if individual.fitness.valid else 0


class ScheduleGenerator:
    """
    Population-based local search. Not exact: it pushes towards fewer shift-level
    clashes, the orchestrator still validates every slot before committing it.
    """

    def __init__(self, courses, rooms, shifts, lecturers, config=None, rng=None):
        if not (courses and rooms and shifts and lecturers):
            raise InvalidArgument("Genetic search needs at least one course, room, shift and lecturer")
        self.config = config or SchedulingConfig()
        self.rng = rng or random.Random()
        self.courses = list(courses)
        self.catalog = {
            COURSE: [c.id for c in courses],
            ROOM: [r.id for r in rooms],
            SHIFT: [s.id for s in shifts],
            LECTURER: [l.id for l in lecturers],
        }
        # dosen yang sesuai per mata kuliah, dipakai hanya untuk populasi awal
        self._eligible = {
            c.id: [l.id for l in lecturers if lecturer_is_eligible(l, c)] for c in courses
        }

        self.toolbox = base.Toolbox()
        self.toolbox.register("individual", self._create_individual)
        self.toolbox.register("mate", self._crossover)
        self.toolbox.register("mutate", self._mutate)
        self.toolbox.register("select_parents", self._select_parents)
        self.toolbox.register("select_elite", tools.selBest)

        self.stats = tools.Statistics(fitness_of)
        self.stats.register("max", numpy.max)
        self.stats.register("avg", numpy.mean)
        self.stats.register("min", numpy.min)
        self.logbook = tools.Logbook()
        self.logbook.header = "gen", "size", "max", "avg", "min"

    @property
    def population_size(self):
        return self.config.population or len(self.courses)

    def _create_individual(self, index):
        course = self.courses[index % len(self.courses)]
        lecturers = self._eligible[course.id] or self.catalog[LECTURER]
        return creator.JadwalIndividual([
            course.id,
            self.rng.choice(self.catalog[ROOM]),
            self.rng.choice(self.catalog[SHIFT]),
            self.rng.choice(lecturers),
        ])

    def _select_parents(self, population):
        # pasangan acak, bukan proporsional terhadap fitness
        return self.rng.choice(population), self.rng.choice(population)

    def _crossover(self, parent1, parent2):
        child = self.toolbox.clone(parent1)
        for gene in range(GENES):
            if self.rng.random() >= 0.5:
                child[gene] = parent2[gene]
        del child.fitness.values
        return child

    def _mutate(self, individual):
        if self.rng.random() < self.config.mutation_rate:
            gene = self.rng.randrange(GENES)
            individual[gene] = self.rng.choice(self.catalog[gene])
            del individual.fitness.values
        return individual,

    def evaluate(self, population):
        for individual, score in zip(population, score_population(population)):
            individual.fitness.values = (score,)

    def run(self):
        """Run exactly `generations` rounds and return the final population, best first."""
        size = self.population_size
        generations = self.config.generations
        elite_size = min(self.config.elite_size, size)
        logger.info("Starting GA optimization with population=%d, generations=%d", size, generations)

        population = [self.toolbox.individual(i) for i in range(size)]
        self.logbook = tools.Logbook()
        self.logbook.header = "gen", "size", "max", "avg", "min"

        for gen in range(generations):
            self.evaluate(population)
            self.logbook.record(gen=gen, size=len(population), **self.stats.compile(population))

            offspring = list(self.toolbox.select_elite(population, elite_size))
            while len(offspring) < size:
                parent1, parent2 = self.toolbox.select_parents(population)
                child = self.toolbox.mate(parent1, parent2)
                child, = self.toolbox.mutate(child)
                offspring.append(child)
            population = offspring

        self.evaluate(population)
        population.sort(key=fitness_of, reverse=True)
        logger.info("GA finished: best fitness %s, average %.2f", fitness_of(population[0]),
                    numpy.mean([fitness_of(ind) for ind in population]))
        return population


def best_per_course(population):
    """Fittest individual for each course present in a (sorted or unsorted) population."""
    best = {}
    for individual in population:
        current = best.get(individual[COURSE])
        if current is None or fitness_of(individual) > fitness_of(current):
            best[individual[COURSE]] = individual
    return best
