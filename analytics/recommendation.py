"""
Neural collaborative-filtering recommender.

Customers are one-hot encoded and a small feed-forward network learns a
softmax distribution over products from observed purchases. The model only
knows the customer/product universe it was trained on; a
``RecommendationSession`` carries that universe next to the model so a stale
model is detectable instead of silently reused on a different batch.

Index conventions (kept from the purchase log format):
  * ``num_customers`` is the number of *distinct* customer ids and customer
    ids are used directly as 0-based one-hot positions.
  * ``num_products`` is ``max(product_id) + 1`` and product ids are 1-based,
    so output index ``i`` scores product ``i + 1``.
"""

import asyncio
import hashlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import numpy as np
import tensorflow as tf

from config.config import RankingConfig, RecommendationModelConfig
from models.product import ProductInfo, Recommendation
from utils.logger import get_logger

from .exceptions import ConfigurationError, EmptyInputError, OutOfRangeError
from .ranking import top_k

logger = get_logger(__name__)


@dataclass
class EncodedPurchases:
    inputs: np.ndarray  # (n_examples, num_customers) one-hot rows
    labels: np.ndarray  # (n_examples,) product index = product_id - 1
    num_customers: int = 0
    num_products: int = 0
    skipped: int = 0

    @property
    def num_examples(self) -> int:
        return int(self.labels.shape[0])


def encode(purchase_pairs: Iterable[tuple[int, int]]) -> EncodedPurchases:
    """
    One-hot encode (customer_id, product_id) pairs for training.

    Pairs whose customer id is negative or not below ``num_customers``, or whose
    product id is below 1, are dropped and counted in ``skipped``.
    An empty input gives zero-sized arrays and zero counts.
    """
    pairs = [(int(c), int(p)) for c, p in purchase_pairs]
    if not pairs:
        return EncodedPurchases(
            inputs=np.zeros((0, 0), dtype=np.float32), labels=np.zeros(0, dtype=np.int64)
        )

    num_customers = len({c for c, _ in pairs})
    max_product = max(p for _, p in pairs)
    num_products = max_product + 1

    kept = [(c, p) for c, p in pairs if 0 <= c < num_customers and 1 <= p <= max_product]
    skipped = len(pairs) - len(kept)
    if skipped:
        logger.warning(
            f"Dropped {skipped} of {len(pairs)} purchase pairs outside the encodable range "
            f"(customer ids 0..{num_customers - 1}, product ids 1..{max_product})"
        )

    inputs = np.zeros((len(kept), num_customers), dtype=np.float32)
    if kept:
        inputs[np.arange(len(kept)), [c for c, _ in kept]] = 1.0
    labels = np.array([p - 1 for _, p in kept], dtype=np.int64)
    return EncodedPurchases(
        inputs=inputs,
        labels=labels,
        num_customers=num_customers,
        num_products=num_products,
        skipped=skipped,
    )


def build_model(
    num_customers: int, num_products: int, config: RecommendationModelConfig | None = None
) -> tf.keras.Model:
    """Dense ReLU stack (128 -> 64 by default) with a softmax over products."""
    config = config or RecommendationModelConfig()
    layers = [tf.keras.Input(shape=(num_customers,))]
    layers += [tf.keras.layers.Dense(units, activation="relu") for units in config.hidden_units]
    layers.append(tf.keras.layers.Dense(num_products, activation="softmax"))
    model = tf.keras.Sequential(layers)
    model.compile(
        optimizer=tf.keras.optimizers.Adam(learning_rate=config.learning_rate),
        loss="categorical_crossentropy",
        metrics=["accuracy"],
    )
    return model


def train(
    inputs: np.ndarray,
    labels: np.ndarray,
    num_products: int | None = None,
    config: RecommendationModelConfig | None = None,
) -> tf.keras.Model:
    """
    Fit a new recommendation model on encoded purchases.

    Blocking; runs ``epochs * ceil(n_examples / batch_size)`` optimizer steps.

    Seeding is process-wide: every call resets the Python, numpy and
    TensorFlow global seeds to ``config.seed`` and, with
    ``config.deterministic_ops``, switches TensorFlow to deterministic ops for
    the rest of the process. Random draws made elsewhere after training are
    therefore reproducible too, and concurrent ``train`` calls in one process
    share that state.

    Args:
        inputs: One-hot customer matrix from ``encode``.
        labels: Product indices from ``encode``.
        num_products: Output width. Defaults to ``labels.max() + 2`` which is
            ``max(product_id) + 1``, the sizing ``encode`` uses.
        config: Architecture and training parameters.

    Raises:
        EmptyInputError: If there are no training examples.
        ConfigurationError: On shape mismatches or labels outside the output range.
    """
    config = config or RecommendationModelConfig()
    inputs = np.asarray(inputs, dtype=np.float32)
    labels = np.asarray(labels, dtype=np.int64)
    if inputs.ndim != 2:
        raise ConfigurationError(f"Inputs must be a 2-D one-hot matrix, got shape {inputs.shape}.")
    if inputs.shape[0] == 0:
        raise EmptyInputError("Cannot train a recommendation model without purchase examples.")
    if inputs.shape[1] == 0:
        raise ConfigurationError("Inputs have zero customer columns.")
    if labels.shape != (inputs.shape[0],):
        raise ConfigurationError(
            f"Labels shape {labels.shape} does not match {inputs.shape[0]} input rows."
        )
    if num_products is None:
        num_products = int(labels.max()) + 2
    if labels.min() < 0 or labels.max() >= num_products:
        raise ConfigurationError(f"Labels must lie in [0, {num_products}).")

    tf.keras.utils.set_random_seed(config.seed)
    if config.deterministic_ops:
        tf.config.experimental.enable_op_determinism()

    model = build_model(inputs.shape[1], num_products, config)
    targets = tf.keras.utils.to_categorical(labels, num_classes=num_products)
    logger.info(
        f"Training recommender on {inputs.shape[0]} examples: {inputs.shape[1]} customers, "
        f"{num_products} products, {config.epochs} epochs, batch size {config.batch_size}"
    )
    history = model.fit(
        inputs,
        targets,
        epochs=config.epochs,
        batch_size=config.batch_size,
        shuffle=config.shuffle,
        verbose=config.verbose,
    )
    logger.info(f"Training finished, final loss {history.history['loss'][-1]:.4f}")
    return model


def _check_customer_id(customer_id, num_customers: int) -> None:
    if isinstance(customer_id, bool) or not isinstance(customer_id, (int, np.integer)):
        raise OutOfRangeError(f"Customer id must be an integer, got {customer_id!r}.")
    if num_customers == 0:
        raise OutOfRangeError(f"Customer id {customer_id} is unknown; no customers were trained.")
    if not 0 <= customer_id < num_customers:
        raise OutOfRangeError(
            f"Customer id {customer_id} is outside the trained range 0..{num_customers - 1}."
        )


def predict(model: tf.keras.Model, customer_id: int, num_customers: int | None = None) -> np.ndarray:
    """
    Score every product for one customer.

    Returns:
        np.ndarray: Softmax distribution of length ``num_products``.

    Raises:
        OutOfRangeError: If ``customer_id`` is not an integer in ``[0, num_customers)``.
    """
    if num_customers is None:
        num_customers = int(model.input_shape[-1])
    _check_customer_id(customer_id, num_customers)
    one_hot = np.zeros((1, num_customers), dtype=np.float32)
    one_hot[0, int(customer_id)] = 1.0
    return np.asarray(model.predict(one_hot, verbose=0)[0], dtype=np.float64)


def _fingerprint(pairs: list[tuple[int, int]]) -> str:
    digest = hashlib.sha256()
    for customer_id, product_id in sorted(pairs):
        digest.update(f"{customer_id}:{product_id};".encode())
    return digest.hexdigest()


@dataclass(frozen=True)
class TrainingUniverse:
    """The customers/products a trained model knows about."""

    num_customers: int
    num_products: int
    num_examples: int
    skipped: int
    fingerprint: str


@dataclass
class RecommendationSession:
    """
    Caller-owned pairing of a trained model with its training universe.

    Read-only after ``fit``; build a new session when the purchase data changes.
    """

    universe: TrainingUniverse
    model: tf.keras.Model | None = None
    ranking: RankingConfig = field(default_factory=RankingConfig)

    @classmethod
    def fit(
        cls,
        purchase_pairs: Iterable[tuple[int, int]],
        config: RecommendationModelConfig | None = None,
        ranking: RankingConfig | None = None,
    ) -> "RecommendationSession":
        """
        Encode and train. An empty pair list gives an untrained session.

        Raises:
            EmptyInputError: If pairs were supplied but every one was dropped by ``encode``.
        """
        pairs = [(int(c), int(p)) for c, p in purchase_pairs]
        encoded = encode(pairs)
        universe = TrainingUniverse(
            num_customers=encoded.num_customers,
            num_products=encoded.num_products,
            num_examples=encoded.num_examples,
            skipped=encoded.skipped,
            fingerprint=_fingerprint(pairs),
        )
        ranking = ranking or RankingConfig()
        if not pairs:
            logger.warning("No purchase pairs, recommendation session left untrained")
            return cls(universe=universe, ranking=ranking)
        if encoded.num_examples == 0:
            raise EmptyInputError(
                f"All {encoded.skipped} purchase pairs fall outside the encodable range; "
                f"customer ids must lie in 0..{encoded.num_customers - 1}."
            )
        model = train(encoded.inputs, encoded.labels, encoded.num_products, config)
        return cls(universe=universe, model=model, ranking=ranking)

    @property
    def is_trained(self) -> bool:
        return self.model is not None

    def is_stale_for(self, purchase_pairs: Iterable[tuple[int, int]]) -> bool:
        """True when ``purchase_pairs`` differ from the pairs this session was trained on."""
        pairs = [(int(c), int(p)) for c, p in purchase_pairs]
        return _fingerprint(pairs) != self.universe.fingerprint

    def predict(self, customer_id: int) -> np.ndarray:
        """
        Raises:
            OutOfRangeError: If the customer is outside the trained universe.
            EmptyInputError: If the session has no trained model.
        """
        _check_customer_id(customer_id, self.universe.num_customers)
        if self.model is None:
            raise EmptyInputError("Recommendation session has no trained model.")
        return predict(self.model, customer_id, self.universe.num_customers)

    def recommend(
        self,
        customer_id: int,
        k: int | None = None,
        product_catalog: Mapping[int, ProductInfo | Mapping] | None = None,
    ) -> list[Recommendation]:
        """Top-``k`` products for a customer; ids are range-checked before anything else."""
        k = self.ranking.top_k if k is None else k
        return top_k(self.predict(customer_id), k, product_catalog, self.ranking)


async def train_session_async(
    purchase_pairs: Iterable[tuple[int, int]],
    config: RecommendationModelConfig | None = None,
    ranking: RankingConfig | None = None,
) -> RecommendationSession:
    """Run ``RecommendationSession.fit`` in a worker thread so the event loop stays responsive."""
    pairs = list(purchase_pairs)
    return await asyncio.to_thread(RecommendationSession.fit, pairs, config, ranking)
