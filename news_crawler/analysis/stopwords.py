"""Fixed per-locale stopword lists."""

from __future__ import annotations

STOPWORDS_EN = frozenset(
    """
    i me my myself we our ours ourselves you your yours yourself yourselves he him his
    himself she her hers herself it its itself they them their theirs themselves what
    which who whom this that these those am is are was were be been being have has had
    having do does did doing a an the and but if or because as until while of at by for
    with about against between into through during before after above below to from up
    down in out on off over under again further then once here there when where why how
    all any both each few more most other some such no nor not only own same so than too
    very s t can will just don should now
    """.split()
)

STOPWORDS_ES = frozenset(
    """
    yo que me mi mí conmigo nosotros nosotras nos nuestro nuestra nuestros nuestras tú tu
    te ti contigo vosotros vosotras os vuestro vuestra vuestros vuestras él el ella ello
    lo los le les se consigo ellos ellas sí ser soy eres es somos sois son era eras
    éramos erais eran fui fuiste fue fuimos fuisteis fueron seré serás será seremos
    seréis serán sería serías seríamos seríais serían estoy estás está estamos estáis
    están estaba estabas estábamos estabais estaban estuve estuviste estuvo estuvimos
    estuvisteis estuvieron esté estés estemos estéis estén estaré estarás estará
    estaremos estaréis estarán estaría estarías estaríamos estaríais estarían tengo
    tienes tiene tenemos tenéis tienen tenía tenías teníamos teníais tenían tuve tuviste
    tuvo tuvimos tuvisteis tuvieron tenga tengas tengamos tengáis tengan tendré tendrás
    tendrá tendremos tendréis tendrán tendría tendrías tendríamos tendríais tendrían
    hacer hago haces hace hacemos hacéis hacen hacía hacías hacíamos hacíais hacían hice
    hiciste hizo hicimos hicisteis hicieron haré harás hará haremos haréis harán haría
    harías haríamos haríais harían ir voy vas va vamos vais van iba ibas íbamos ibais
    iban vaya vayas vayamos vayáis vayan iré irás irá iremos iréis irán iría irías
    iríamos iríais irían de desde a ante bajo cabe con en entre hasta hacia sin sobre
    tras la para por mientras un una ni siquiera
    """.split()
)

_BY_LANGUAGE = {"EN": STOPWORDS_EN, "ES": STOPWORDS_ES}


def stopwords_for(language: str) -> frozenset[str]:
    try:
        return _BY_LANGUAGE[language.upper()]
    except KeyError:
        raise ValueError(f"Unsupported language: {language}") from None


__all__ = ["STOPWORDS_EN", "STOPWORDS_ES", "stopwords_for"]
