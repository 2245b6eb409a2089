"""In-page scripts evaluated by RenderSurface.run_script.

The scripts only gather raw, serializable data from the rendered DOM.
Interpreting that data (prices, titles, URLs...) is left to the pure
functions in src.scrapers.extraction_rules so each rule can be tested
without a browser.
"""

# Readiness condition for listings that expose no stable card class.
PRICE_ELEMENTS_PRESENT = (
    "() => document.querySelectorAll('[class*=\"price\"]').length > 0"
)

DETAIL_SECTION_SELECTOR = (
    '[class*="detail"], [class*="description"], [class*="product-info"]'
)

# Argument: {mode, containerSelector, scanSelector, markerPattern,
#            markerFlags, maxTextLength, fields: {name: {selector, attribute}}}
# Returns:  {url, bodyText, cards: [{text, links, images, fields} | {error}]}
CARD_SNAPSHOT_SCRIPT = """
(options) => {
  const textOf = (el) => ((el && (el.innerText || el.textContent)) || '').trim();
  const imageSource = (img) =>
    img.currentSrc || img.src || img.getAttribute('data-src') || '';

  let containers;
  if (options.mode === 'marker') {
    const marker = new RegExp(options.markerPattern, options.markerFlags || '');
    containers = Array.from(document.querySelectorAll(options.scanSelector))
      .filter((el) => {
        const text = textOf(el);
        return text.length < options.maxTextLength && marker.test(text);
      });
  } else {
    containers = Array.from(document.querySelectorAll(options.containerSelector));
  }

  const cards = containers.map((card) => {
    try {
      const fields = {};
      for (const [name, fieldSpec] of Object.entries(options.fields || {})) {
        const el = card.querySelector(fieldSpec.selector);
        if (!el) {
          fields[name] = null;
          continue;
        }
        let attribute = null;
        if (fieldSpec.attribute) {
          attribute = el.getAttribute(fieldSpec.attribute);
          if (!attribute && fieldSpec.attribute === 'src') {
            attribute = el.getAttribute('data-src');
          }
        }
        fields[name] = { text: textOf(el), attribute };
      }
      return {
        text: textOf(card),
        links: Array.from(card.querySelectorAll('a[href]')).map((a) => ({
          href: a.getAttribute('href'),
          text: textOf(a),
        })),
        images: Array.from(card.querySelectorAll('img')).map(imageSource),
        fields,
      };
    } catch (err) {
      return { error: String((err && err.message) || err) };
    }
  });

  return { url: window.location.href, bodyText: textOf(document.body), cards };
}
"""

# Argument: {brandSelector, priceSelector, ratingSelector, detailSelector}
PRODUCT_PAGE_SCRIPT = """
(options) => {
  const textOf = (el) => ((el && (el.innerText || el.textContent)) || '').trim();
  const first = (selector) => (selector ? document.querySelector(selector) : null);
  const ratingEl = first(options.ratingSelector);

  return {
    url: window.location.href,
    heading: textOf(document.querySelector('h1')) || null,
    bodyText: textOf(document.body),
    brandText: textOf(first(options.brandSelector)) || null,
    priceText: textOf(first(options.priceSelector)) || null,
    ratingText: ratingEl ? textOf(ratingEl) : null,
    ratingLabel: ratingEl ? ratingEl.getAttribute('aria-label') : null,
    images: Array.from(document.querySelectorAll('img'))
      .map((img) => img.currentSrc || img.src || img.getAttribute('data-src') || '')
      .filter(Boolean),
    details: Array.from(document.querySelectorAll(options.detailSelector))
      .map(textOf)
      .filter(Boolean),
  };
}
"""
